"""Tests for sdlbake.core.strings and generated identifier names."""

from graphql import build_schema

from sdlbake.codegen import names
from sdlbake.core.strings import RESERVED_NAMES, camel_to_snake, is_identifier, pascal_case


class TestCaseConversion:
    def test_camel_to_snake(self):
        assert camel_to_snake("parseValue") == "parse_value"
        assert camel_to_snake("SearchResult") == "search_result"
        assert camel_to_snake("HTTPHeader") == "http_header"
        assert camel_to_snake("user2Fa") == "user2_fa"

    def test_pascal_case(self):
        assert pascal_case("auth") == "Auth"
        assert pascal_case("rate_limit") == "RateLimit"
        assert pascal_case("isAdmin") == "IsAdmin"


class TestIdentifiers:
    def test_keywords_are_not_identifiers(self):
        assert is_identifier("color")
        assert not is_identifier("class")
        assert not is_identifier("in")
        assert not is_identifier("2fa")

    def test_reserved_names(self):
        assert "id" in RESERVED_NAMES
        assert "list" in RESERVED_NAMES
        assert "None" in RESERVED_NAMES
        assert "hero" not in RESERVED_NAMES


class TestGeneratedNames:
    def test_runtime_names(self):
        schema = build_schema(
            """
            scalar Date
            enum Color { RED }
            union Result = Query
            type Query { color: Color, date: Date, result: Result }
            """
        )

        assert names.runtime_name(schema.get_type("Date")) == "DateScalar"
        assert names.runtime_name(schema.get_type("Color")) == "ColorEnum"
        assert names.runtime_name(schema.get_type("Result")) == "ResultType"
        assert names.shape_name(schema.get_type("Color")) == "EColor"
        assert names.shape_name(schema.get_type("Query")) == "Query"

    def test_helper_names(self):
        assert names.directive_name("rate_limit") == "RateLimitDirective"
        assert names.resolve_type_name("SearchResult") == "_resolve_search_result_type"
        assert names.member_tokens_name("SearchResult") == "_SEARCH_RESULT_MEMBERS"
        assert names.cast_name("BlogPost", "SearchResult") == "as_blog_post_search_result"
        assert names.args_transform_name("Query", "findUsers") == "_transform_args_query_find_users"
        assert names.guard_name("OrderStatus") == "is_order_status"

    def test_enum_member_names(self):
        members = names.enum_member_names(["RED", "mro", "mro_", "_hidden_", "name"])

        assert members == {
            "RED": "RED",
            "mro": "mro__",
            "mro_": "mro_",
            "_hidden_": "_hidden__",
            "name": "name",
        }

    def test_discriminant_tokens(self):
        assert names.discriminant_key(3) == "__sdlbake_3"
        assert names.member_token(3, 2) == "__sdlbake_3_2"
