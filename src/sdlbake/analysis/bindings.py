"""
Reference resolution: map schema elements to binding references.

Resolvers live in a directory with one entry per schema type:

    resolvers/
        Query.py          # def hero(obj, info, **args): ...
        User/
            friends.py    # def friends(obj, info): ...
            profile.py    # def avatar(obj, info): ...

Subscribers, field directives and input directives are single modules (or
directories of modules) whose exported callables are keyed by field name
or directive name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from graphql import GraphQLInterfaceType, GraphQLObjectType, GraphQLSchema

from ..context import GenerationContext
from ..core.ir import ScalarBinding, SymbolReference
from ..core.manifest import BindingPaths
from .exports import ExportAnalyzer
from .modules import SOURCE_SUFFIX
from .scalars import ScalarAnalyzer

logger = logging.getLogger(__name__)

ReferenceMap = dict[str, SymbolReference]


@dataclass
class Bindings:
    """
    All bindings supplied for one schema.

    Attributes:
        resolvers: type name -> field name -> resolver
        subscribers: subscription field name -> subscriber
        scalars: scalar name -> codec binding
        field_directives: directive name -> resolver middleware factory
        input_directives: directive name -> input value transform
        include_subscription_resolvers: wire resolvers on the subscription root
    """

    resolvers: dict[str, ReferenceMap] = field(default_factory=dict)
    subscribers: ReferenceMap = field(default_factory=dict)
    scalars: dict[str, ScalarBinding] = field(default_factory=dict)
    field_directives: ReferenceMap = field(default_factory=dict)
    input_directives: ReferenceMap = field(default_factory=dict)
    include_subscription_resolvers: bool = False

    def resolver_for(
        self,
        schema: GraphQLSchema,
        type_: GraphQLObjectType | GraphQLInterfaceType,
        field_name: str,
    ) -> SymbolReference | None:
        """
        Resolver of a field.

        Precedence: a binding for the type itself, then the first interface
        (in declaration order) that binds the field.
        """
        if (
            schema.subscription_type is type_
            and not self.include_subscription_resolvers
        ):
            return None

        direct = self.resolvers.get(type_.name, {}).get(field_name)
        if direct is not None:
            return direct
        for interface in type_.interfaces:
            inherited = self.resolvers.get(interface.name, {}).get(field_name)
            if inherited is not None:
                return inherited
        return None

    def subscriber_for(
        self,
        schema: GraphQLSchema,
        type_: GraphQLObjectType | GraphQLInterfaceType,
        field_name: str,
    ) -> SymbolReference | None:
        """Subscriber of a field; only fields of the subscription root have one."""
        if schema.subscription_type is not type_:
            return None
        return self.subscribers.get(field_name)


class BindingLoader:
    """Discover binding references in modules and directories."""

    def __init__(self, ctx: GenerationContext):
        self.ctx = ctx
        self.analyzer = ExportAnalyzer(ctx)
        self.scalar_analyzer = ScalarAnalyzer(ctx, self.analyzer)

    def load(self, paths: BindingPaths, include_subscription_resolvers: bool = False) -> Bindings:
        """Load every configured binding location."""
        return Bindings(
            resolvers=self.load_resolvers(paths.resolvers) if paths.resolvers else {},
            subscribers=self.load_references(paths.subscribers) if paths.subscribers else {},
            scalars=self.scalar_analyzer.scalars(paths.scalars) if paths.scalars else {},
            field_directives=(
                self.load_references(paths.field_directives) if paths.field_directives else {}
            ),
            input_directives=(
                self.load_references(paths.input_directives) if paths.input_directives else {}
            ),
            include_subscription_resolvers=include_subscription_resolvers,
        )

    def load_resolvers(self, root: Path) -> dict[str, ReferenceMap]:
        """Resolvers keyed by type name, then field name."""
        resolvers: dict[str, ReferenceMap] = {}
        for entry in _entries(root):
            if entry.is_file() and entry.suffix == SOURCE_SUFFIX:
                type_name = entry.stem
                refs = self.load_module(entry)
            elif entry.is_dir():
                type_name = entry.name
                refs = self.load_directory(entry)
            else:
                continue
            _merge_first_wins(resolvers.setdefault(type_name, {}), refs, type_name)
        return resolvers

    def load_references(self, path: Path) -> ReferenceMap:
        """Exported callables of a module, or of every module in a directory."""
        if path.is_dir():
            return self.load_directory(path)
        return self.load_module(path)

    def load_directory(self, directory: Path) -> ReferenceMap:
        refs: ReferenceMap = {}
        for entry in _entries(directory):
            if entry.is_file() and entry.suffix == SOURCE_SUFFIX:
                _merge_first_wins(refs, self.load_module(entry), directory.name)
        return refs

    def load_module(self, path: Path) -> ReferenceMap:
        path = path.resolve()
        refs: ReferenceMap = {}
        for name, decls in self.analyzer.exports(path).items():
            if any(decl.is_callable() for decl in decls):
                refs[name] = SymbolReference(module=str(path), symbol=name)
            else:
                logger.debug("%s: export '%s' is not callable, skipped", path, name)
        return refs


def _entries(directory: Path) -> list[Path]:
    return sorted(
        entry
        for entry in directory.iterdir()
        if not entry.name.startswith(("_", "."))
    )


def _merge_first_wins(target: ReferenceMap, incoming: ReferenceMap, owner: str) -> None:
    for name, ref in incoming.items():
        existing = target.get(name)
        if existing is None:
            target[name] = ref
        elif not existing.same_target(ref):
            logger.warning(
                "Duplicate binding for %s.%s in %s and %s; using the first",
                owner,
                name,
                existing.module,
                ref.module,
            )
