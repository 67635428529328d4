"""
Проверки объявлений unit-типов.

- declarations: сверка типизированных операторов с operator table (в seal())
- static: прогон snippet'ов через mypy (требует extra ``typecheck``),
  импортируется явно: ``from typedunits.checks.static import run_mypy``
"""

from .declarations import OPERATOR_METHODS, declared_signatures, verify_declarations

__all__ = [
    "OPERATOR_METHODS",
    "declared_signatures",
    "verify_declarations",
]
