"""Static reading of JavaScript and TypeScript config modules."""

from cypress_parallel.parsing.module_loader import (
    ModuleEvaluationError,
    Unresolved,
    load_module_exports,
)
from cypress_parallel.parsing.transpile import Diagnostic, TranspileOutput, transpile_module

__all__ = [
    "Diagnostic",
    "ModuleEvaluationError",
    "TranspileOutput",
    "Unresolved",
    "load_module_exports",
    "transpile_module",
]
