"""Tests for merging per-file schema documents."""

from __future__ import annotations

import logging

import pytest
from graphql import print_ast

from sdlbake.core.errors import (
    DirectiveConflict,
    EnumValueConflict,
    FieldConflict,
    InputFieldConflict,
    KindConflict,
    MergeError,
    UnsupportedDefinition,
)
from sdlbake.core.merger import merge_documents


def _by_name(document):
    return {definition.name.value: definition for definition in document.definitions}


def _field_names(definition):
    return [field.name.value for field in definition.fields]


class TestObjectMerging:
    """Re-declared object and interface types."""

    def test_fields_are_unioned(self, parse_sdl, caplog):
        a = parse_sdl("type User { id: ID! }", "a.graphql")
        b = parse_sdl("type User { id: ID!, name: String }", "b.graphql")

        with caplog.at_level(logging.WARNING, logger="sdlbake"):
            merged = merge_documents([a, b])

        user = _by_name(merged)["User"]
        assert _field_names(user) == ["id", "name"]

        duplicates = [r for r in caplog.records if "more than one declaration" in r.getMessage()]
        assert len(duplicates) == 1
        message = duplicates[0].getMessage()
        assert "User.id" in message
        assert "a.graphql" in message and "b.graphql" in message

    def test_conflicting_field_types_fail(self, parse_sdl):
        a = parse_sdl("type User { id: ID! }", "a.graphql")
        b = parse_sdl("type User { id: String! }", "b.graphql")

        with pytest.raises(FieldConflict) as exc_info:
            merge_documents([a, b])

        message = str(exc_info.value)
        assert "User.id" in message
        assert "a.graphql:1:13" in message
        assert "b.graphql:1:13" in message

    def test_conflicting_arguments_fail(self, parse_sdl):
        a = parse_sdl("type Query { users(first: Int = 10): [ID] }", "a.graphql")
        b = parse_sdl("type Query { users(first: Int = 20): [ID] }", "b.graphql")

        with pytest.raises(FieldConflict):
            merge_documents([a, b])

    def test_interfaces_are_unioned_in_first_seen_order(self, parse_sdl):
        a = parse_sdl("type User implements Node { id: ID! }", "a.graphql")
        b = parse_sdl("type User implements Entity & Node { id: ID! }", "b.graphql")

        user = _by_name(merge_documents([a, b]))["User"]

        assert [i.name.value for i in user.interfaces] == ["Node", "Entity"]

    def test_identical_field_directives_are_kept_once(self, parse_sdl):
        a = parse_sdl('type User { name: String @upper(mode: "a") }', "a.graphql")
        b = parse_sdl('type User { name: String @upper(mode: "a") @trim }', "b.graphql")

        user = _by_name(merge_documents([a, b]))["User"]

        assert [d.name.value for d in user.fields[0].directives] == ["upper", "trim"]

    def test_differing_directive_arguments_fail(self, parse_sdl):
        a = parse_sdl('type User @cache(ttl: 10) { id: ID }', "a.graphql")
        b = parse_sdl('type User @cache(ttl: 20) { id: ID }', "b.graphql")

        with pytest.raises(DirectiveConflict):
            merge_documents([a, b])

    def test_repeated_directive_merges_with_identical_copy(self, parse_sdl):
        body = 'type Query { a: Int @tag(n: "x") @tag(n: "y") }'
        a = parse_sdl(
            f"directive @tag(n: String) repeatable on FIELD_DEFINITION\n{body}", "a.graphql"
        )
        b = parse_sdl(body, "b.graphql")

        query = _by_name(merge_documents([a, b]))["Query"]

        tags = query.fields[0].directives
        assert [d.arguments[0].value.value for d in tags] == ["x", "y"]

    def test_repeated_directive_in_another_order_fails(self, parse_sdl):
        a = parse_sdl('type Query { a: Int @tag(n: "x") @tag(n: "y") }', "a.graphql")
        b = parse_sdl('type Query { a: Int @tag(n: "y") @tag(n: "x") }', "b.graphql")

        with pytest.raises(DirectiveConflict, match="Query.a"):
            merge_documents([a, b])

    def test_first_description_wins(self, parse_sdl, caplog):
        a = parse_sdl('"A user" type User { id: ID }', "a.graphql")
        b = parse_sdl('"Someone" type User { name: String }', "b.graphql")

        with caplog.at_level(logging.WARNING, logger="sdlbake"):
            user = _by_name(merge_documents([a, b]))["User"]

        assert user.description.value == "A user"
        assert any("Conflicting descriptions" in r.getMessage() for r in caplog.records)


class TestOtherKinds:
    def test_enum_values_are_appended(self, parse_sdl):
        a = parse_sdl("enum Color { RED GREEN }", "a.graphql")
        b = parse_sdl("enum Color { BLUE }", "b.graphql")

        color = _by_name(merge_documents([a, b]))["Color"]

        assert [v.name.value for v in color.values] == ["RED", "GREEN", "BLUE"]

    def test_duplicate_enum_value_fails(self, parse_sdl):
        a = parse_sdl("enum Color { RED GREEN }", "a.graphql")
        b = parse_sdl("enum Color { GREEN BLUE }", "b.graphql")

        with pytest.raises(EnumValueConflict) as exc_info:
            merge_documents([a, b])

        assert "Color.GREEN" in str(exc_info.value)

    def test_union_members_are_unioned(self, parse_sdl):
        a = parse_sdl("union SearchResult = User | Post", "a.graphql")
        b = parse_sdl("union SearchResult = Post | Comment", "b.graphql")

        result = _by_name(merge_documents([a, b]))["SearchResult"]

        assert [t.name.value for t in result.types] == ["User", "Post", "Comment"]

    def test_input_fields_must_agree(self, parse_sdl):
        a = parse_sdl("input Filter { limit: Int = 10 }", "a.graphql")
        b = parse_sdl("input Filter { limit: Int = 5 }", "b.graphql")

        with pytest.raises(InputFieldConflict):
            merge_documents([a, b])

    def test_input_fields_are_unioned(self, parse_sdl):
        a = parse_sdl("input Filter { limit: Int }", "a.graphql")
        b = parse_sdl("input Filter { offset: Int }", "b.graphql")

        filter_ = _by_name(merge_documents([a, b]))["Filter"]

        assert _field_names(filter_) == ["limit", "offset"]

    def test_scalar_redeclaration_merges_directives(self, parse_sdl):
        a = parse_sdl("scalar Date @format(pattern: \"iso\")", "a.graphql")
        b = parse_sdl("scalar Date", "b.graphql")

        date = _by_name(merge_documents([a, b]))["Date"]

        assert [d.name.value for d in date.directives] == ["format"]

    def test_directive_defined_twice_fails(self, parse_sdl):
        a = parse_sdl("directive @auth on FIELD_DEFINITION", "a.graphql")
        b = parse_sdl("directive @auth on FIELD_DEFINITION", "b.graphql")

        with pytest.raises(DirectiveConflict):
            merge_documents([a, b])

    def test_kind_mismatch_fails(self, parse_sdl):
        a = parse_sdl("type Status { id: ID }", "a.graphql")
        b = parse_sdl("enum Status { ACTIVE }", "b.graphql")

        with pytest.raises(KindConflict) as exc_info:
            merge_documents([a, b])

        assert "'Status' is declared as both type and enum" in str(exc_info.value)

    def test_types_and_directives_have_separate_namespaces(self, parse_sdl):
        doc = parse_sdl(
            """
            directive @User on OBJECT
            type User { id: ID }
            """
        )

        merged = merge_documents([doc])

        assert len(merged.definitions) == 2


class TestRejectedDefinitions:
    @pytest.mark.parametrize(
        "body",
        [
            "schema { query: Query }",
            "extend type User { name: String }",
            "query { hero }",
        ],
    )
    def test_unsupported_definitions(self, parse_sdl, body):
        with pytest.raises(UnsupportedDefinition):
            merge_documents([parse_sdl(body)])

    def test_no_documents(self):
        with pytest.raises(MergeError):
            merge_documents([])


class TestMergeOrder:
    def test_definitions_keep_first_seen_order(self, parse_sdl):
        a = parse_sdl("type B { id: ID }\ntype A { id: ID }", "a.graphql")
        b = parse_sdl("type C { id: ID }\ntype B { name: String }", "b.graphql")

        merged = merge_documents([a, b])

        assert [d.name.value for d in merged.definitions] == ["B", "A", "C"]

    def test_merged_document_prints(self, parse_sdl):
        a = parse_sdl("type Query { a: Int }", "a.graphql")
        b = parse_sdl("type Query { b: Int }", "b.graphql")

        printed = print_ast(merge_documents([a, b]))

        assert "a: Int" in printed and "b: Int" in printed
