"""
Static analysis of binding modules.

Binding modules are parsed with :mod:`ast` and never imported.
"""

from .bindings import BindingLoader, Bindings
from .exports import Declaration, ExportAnalyzer, ExportTable
from .scalars import ScalarAnalyzer

__all__ = [
    "BindingLoader",
    "Bindings",
    "Declaration",
    "ExportAnalyzer",
    "ExportTable",
    "ScalarAnalyzer",
]
