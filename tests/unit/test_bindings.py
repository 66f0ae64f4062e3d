"""Tests for loading binding locations and resolver precedence."""

from __future__ import annotations

import pytest
from graphql import build_schema

from sdlbake.analysis.bindings import BindingLoader, Bindings
from sdlbake.context import GenerationContext
from sdlbake.core.ir import SymbolReference
from sdlbake.core.manifest import BindingPaths

SCHEMA = build_schema(
    """
    interface Node { id: ID! }
    interface Named { name: String }
    type User implements Node & Named { id: ID!, name: String, email: String }
    type Query { user: User, node: Node }
    type Subscription { userAdded: User }
    """
)


def _ref(symbol: str, module: str = "m.py") -> SymbolReference:
    return SymbolReference(module=module, symbol=symbol)


@pytest.fixture
def loader(ctx: GenerationContext) -> BindingLoader:
    return BindingLoader(ctx)


class TestResolverPrecedence:
    def test_direct_binding_wins(self):
        bindings = Bindings(
            resolvers={"User": {"id": _ref("user_id")}, "Node": {"id": _ref("node_id")}}
        )

        ref = bindings.resolver_for(SCHEMA, SCHEMA.get_type("User"), "id")

        assert ref == _ref("user_id")

    def test_first_declared_interface_wins(self):
        bindings = Bindings(
            resolvers={"Named": {"id": _ref("named_id")}, "Node": {"id": _ref("node_id")}}
        )

        ref = bindings.resolver_for(SCHEMA, SCHEMA.get_type("User"), "id")

        assert ref == _ref("node_id")

    def test_unbound_field(self):
        bindings = Bindings(resolvers={"Node": {"id": _ref("node_id")}})

        assert bindings.resolver_for(SCHEMA, SCHEMA.get_type("User"), "email") is None

    def test_subscription_root_resolvers_are_opt_in(self):
        resolvers = {"Subscription": {"userAdded": _ref("user_added")}}
        subscription = SCHEMA.subscription_type

        assert Bindings(resolvers=resolvers).resolver_for(SCHEMA, subscription, "userAdded") is None
        assert Bindings(
            resolvers=resolvers, include_subscription_resolvers=True
        ).resolver_for(SCHEMA, subscription, "userAdded") == _ref("user_added")

    def test_subscribers_only_bind_the_subscription_root(self):
        bindings = Bindings(subscribers={"userAdded": _ref("on_user"), "user": _ref("x")})

        assert bindings.subscriber_for(SCHEMA, SCHEMA.subscription_type, "userAdded") == _ref(
            "on_user"
        )
        assert bindings.subscriber_for(SCHEMA, SCHEMA.query_type, "user") is None


class TestBindingLoader:
    def test_resolver_files_and_directories(self, write_tree, loader):
        root = write_tree(
            {
                "resolvers/Query.py": """
                def user(obj, info):
                    return {"id": "1"}

                node = lambda obj, info: None
                LIMIT = 10
                """,
                "resolvers/User/name.py": "def name(obj, info): ...\n",
                "resolvers/User/profile.py": "def email(obj, info): ...\n",
                "resolvers/_helpers.py": "def user(obj, info): ...\n",
            }
        )

        resolvers = loader.load_resolvers(root / "resolvers")

        assert sorted(resolvers) == ["Query", "User"]
        assert sorted(resolvers["Query"]) == ["node", "user"]
        assert resolvers["User"]["email"] == SymbolReference(
            module=str((root / "resolvers" / "User" / "profile.py").resolve()), symbol="email"
        )

    def test_first_file_in_a_directory_wins(self, write_tree, loader, caplog):
        root = write_tree(
            {
                "resolvers/User/a.py": "def name(obj, info): ...\n",
                "resolvers/User/b.py": "def name(obj, info): ...\n",
            }
        )

        resolvers = loader.load_resolvers(root / "resolvers")

        assert resolvers["User"]["name"].module.endswith("a.py")
        assert any("Duplicate binding for User.name" in r.getMessage() for r in caplog.records)

    def test_re_exported_resolvers(self, write_tree, loader):
        root = write_tree(
            {
                "impl.py": "def find_user(obj, info): ...\n",
                "resolvers/Query.py": "from ..impl import find_user as user\n",
            }
        )

        refs = loader.load_module(root / "resolvers" / "Query.py")

        # The generated module imports through the binding module itself
        assert refs == {
            "user": SymbolReference(
                module=str((root / "resolvers" / "Query.py").resolve()), symbol="user"
            )
        }

    def test_load_all_locations(self, write_tree, loader):
        root = write_tree(
            {
                "resolvers/Query.py": "def user(obj, info): ...\n",
                "subscribers.py": "async def userAdded(obj, info): ...\n",
                "scalars.py": """
                class Date:
                    @staticmethod
                    def serialize(value) -> str:
                        return str(value)
                """,
                "directives/upper.py": "def upper(resolve, args): ...\n",
                "inputs.py": "def trim(value, args): ...\n",
            }
        )

        bindings = loader.load(
            BindingPaths(
                scalars=root / "scalars.py",
                resolvers=root / "resolvers",
                subscribers=root / "subscribers.py",
                field_directives=root / "directives",
                input_directives=root / "inputs.py",
            ),
            include_subscription_resolvers=True,
        )

        assert list(bindings.resolvers["Query"]) == ["user"]
        assert list(bindings.subscribers) == ["userAdded"]
        assert list(bindings.scalars) == ["Date"]
        assert list(bindings.field_directives) == ["upper"]
        assert list(bindings.input_directives) == ["trim"]
        assert bindings.include_subscription_resolvers

    def test_missing_locations_are_empty(self, loader):
        bindings = loader.load(BindingPaths())

        assert bindings == Bindings()
