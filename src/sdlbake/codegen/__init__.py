"""
Python code generation from a validated schema.
"""

from .packages import ModuleLocator, RequiredPackages
from .renderer import SchemaRenderer

__all__ = [
    "ModuleLocator",
    "RequiredPackages",
    "SchemaRenderer",
]
