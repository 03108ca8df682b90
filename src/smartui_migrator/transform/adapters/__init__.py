"""Grammar adapters for the tree-based transform variants."""

from .base import Binding, CallSite, ImportTable, LanguageAdapter
from .java import JavaAdapter
from .javascript import JavaScriptAdapter, TsxAdapter, TypeScriptAdapter
from .python import PythonAdapter

__all__ = [
    "Binding",
    "CallSite",
    "ImportTable",
    "JavaAdapter",
    "JavaScriptAdapter",
    "LanguageAdapter",
    "PythonAdapter",
    "TsxAdapter",
    "TypeScriptAdapter",
]
