"""Tests for scalar codec discovery and Python type inference."""

from __future__ import annotations

import pytest

from sdlbake.analysis.exports import ExportAnalyzer
from sdlbake.analysis.scalars import ScalarAnalyzer
from sdlbake.context import GenerationContext
from sdlbake.core.errors import AmbiguousScalarType, UnsupportedConstruct
from sdlbake.core.ir import SymbolReference


def _analyzer(ctx: GenerationContext) -> ScalarAnalyzer:
    return ScalarAnalyzer(ctx, ExportAnalyzer(ctx))


@pytest.fixture
def scalars(ctx: GenerationContext) -> ScalarAnalyzer:
    return _analyzer(ctx)


class TestCodecDiscovery:
    def test_static_methods(self, write_tree, scalars):
        root = write_tree(
            {
                "scalars.py": """
                from datetime import date


                class Date:
                    @staticmethod
                    def serialize(value: date) -> str:
                        return value.isoformat()

                    @staticmethod
                    def parse_value(value: str) -> date:
                        return date.fromisoformat(value)

                    @staticmethod
                    def parse_literal(node, variables=None) -> date:
                        return date.fromisoformat(node.value)
                """
            }
        )
        path = str((root / "scalars.py").resolve())

        binding = scalars.scalars(root / "scalars.py")["Date"]

        assert binding.serialize == SymbolReference(
            module=path, symbol="Date", property="serialize"
        )
        assert binding.parse_literal is not None
        assert binding.type == SymbolReference(module="datetime", symbol="date")

    def test_assigned_functions_and_lambdas(self, write_tree, scalars):
        root = write_tree(
            {
                "scalars.py": """
                def parse_cents(value) -> int:
                    return int(value)


                class Money:
                    serialize = lambda value: value / 100
                    parse_value = parse_cents
                """
            }
        )

        binding = scalars.scalars(root / "scalars.py")["Money"]

        assert binding.serialize is not None
        assert binding.parse_literal is None
        assert binding.type == SymbolReference(symbol="int")

    def test_classes_without_codecs_are_skipped(self, write_tree, scalars):
        root = write_tree({"scalars.py": "class Helper:\n    value = 1\n"})

        assert scalars.scalars(root / "scalars.py") == {}

    def test_extraneous_members_warn(self, write_tree, scalars, caplog):
        root = write_tree(
            {
                "scalars.py": """
                class Url:
                    @staticmethod
                    def serialize(value) -> str:
                        return str(value)

                    @staticmethod
                    def normalize(value):
                        return value
                """
            }
        )

        scalars.scalars(root / "scalars.py")

        assert any("extraneous scalar property" in r.getMessage() for r in caplog.records)

    def test_instance_methods_are_unsupported_in_strict_mode(self, write_tree):
        root = write_tree(
            {
                "scalars.py": """
                class Url:
                    def serialize(self, value) -> str:
                        return str(value)
                """
            }
        )

        with pytest.raises(UnsupportedConstruct, match="staticmethod"):
            _analyzer(GenerationContext(strict=True)).scalars(root / "scalars.py")


class TestTypeInference:
    def test_conflicting_parser_types_fail(self, write_tree, scalars):
        root = write_tree(
            {
                "scalars.py": """
                from datetime import date


                class Day:
                    @staticmethod
                    def serialize(value) -> str:
                        return str(value)

                    @staticmethod
                    def parse_value(value) -> date:
                        return date.fromisoformat(value)

                    @staticmethod
                    def parse_literal(node, variables=None) -> str:
                        return node.value
                """
            }
        )

        with pytest.raises(AmbiguousScalarType, match="Day"):
            scalars.scalars(root / "scalars.py")

    def test_awaitable_is_unwrapped(self, write_tree, scalars):
        root = write_tree(
            {
                "scalars.py": """
                from collections.abc import Awaitable
                from decimal import Decimal


                class Amount:
                    @staticmethod
                    def serialize(value) -> str:
                        return str(value)

                    @staticmethod
                    def parse_value(value) -> "Awaitable[Decimal]":
                        ...
                """
            }
        )

        binding = scalars.scalars(root / "scalars.py")["Amount"]

        assert binding.type == SymbolReference(module="decimal", symbol="Decimal")

    def test_relative_and_type_checking_imports(self, write_tree, scalars):
        root = write_tree(
            {
                "models.py": "class Point:\n    pass\n",
                "scalars.py": """
                from typing import TYPE_CHECKING

                if TYPE_CHECKING:
                    from .models import Point as P


                class Coordinates:
                    @staticmethod
                    def serialize(value) -> str:
                        return str(value)

                    @staticmethod
                    def parse_value(value) -> "P":
                        ...
                """,
            }
        )

        binding = scalars.scalars(root / "scalars.py")["Coordinates"]

        assert binding.type == SymbolReference(
            module=str((root / "models.py").resolve()), symbol="Point", alias="P"
        )

    def test_local_exported_type(self, write_tree, scalars):
        root = write_tree(
            {
                "scalars.py": """
                class Color:
                    pass


                class Hex:
                    @staticmethod
                    def serialize(value) -> str:
                        return str(value)

                    @staticmethod
                    def parse_value(value) -> Color:
                        ...
                """
            }
        )
        path = str((root / "scalars.py").resolve())

        binding = scalars.scalars(root / "scalars.py")["Hex"]

        assert binding.type == SymbolReference(module=path, symbol="Color")

    def test_local_type_missing_from_all_warns(self, write_tree, scalars, caplog):
        root = write_tree(
            {
                "scalars.py": """
                __all__ = ["Hex"]


                class Color:
                    pass


                class Hex:
                    @staticmethod
                    def parse_value(value) -> Color:
                        ...
                """
            }
        )

        binding = scalars.scalars(root / "scalars.py")["Hex"]

        assert binding.type is None
        assert any(
            "type 'Color' is declared but not exported" in r.getMessage() for r in caplog.records
        )

    _QUALIFIED = {
        "scalars.py": """
        import datetime


        class Day:
            @staticmethod
            def parse_value(value) -> datetime.date:
                return datetime.date.fromisoformat(value)
        """
    }

    def test_qualified_annotation_warns(self, write_tree, scalars, caplog):
        root = write_tree(self._QUALIFIED)

        binding = scalars.scalars(root / "scalars.py")["Day"]

        assert binding.type is None
        assert any(
            "Qualified type reference 'datetime.date' is not supported" in r.getMessage()
            for r in caplog.records
        )

    def test_qualified_annotation_fails_in_strict_mode(self, write_tree):
        root = write_tree(self._QUALIFIED)
        scalars = _analyzer(GenerationContext(strict=True))

        with pytest.raises(UnsupportedConstruct, match="datetime.date"):
            scalars.scalars(root / "scalars.py")

    def test_uninferable_type_warns(self, write_tree, scalars, caplog):
        root = write_tree(
            {
                "scalars.py": """
                class Blob:
                    @staticmethod
                    def serialize(value):
                        return value
                """
            }
        )

        binding = scalars.scalars(root / "scalars.py")["Blob"]

        assert binding.type is None
        assert any("cannot infer the Python type" in r.getMessage() for r in caplog.records)

    def test_inferred_types_are_cached_per_context(self, write_tree, ctx, scalars):
        root = write_tree(
            {
                "scalars.py": """
                class Count:
                    @staticmethod
                    def parse_value(value) -> int:
                        return int(value)
                """
            }
        )

        scalars.scalars(root / "scalars.py")

        assert ctx.scalar_types == {
            (str((root / "scalars.py").resolve()), "Count"): SymbolReference(symbol="int")
        }
