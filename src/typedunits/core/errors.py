"""
Ошибки typedunits

Статический type checker — основной рубеж: недопустимые комбинации единиц
не должны проходить mypy. Исключения ниже — runtime fallback того же контракта
(более слабая гарантия), плюс ошибки построения реестров.

Каждая ошибка несёт стабильный строковый code, чтобы тесты и вызывающий код
не зависели от текста сообщения.
"""

from typing import Final, Optional


# =============================================================================
# КОДЫ ОШИБОК
# =============================================================================

E_OPERATOR_UNDECLARED: Final[str] = "E_OPERATOR_UNDECLARED"
E_PRIMITIVE_OPERAND: Final[str] = "E_PRIMITIVE_OPERAND"
E_UNIT_MISMATCH: Final[str] = "E_UNIT_MISMATCH"
E_RESULT_TYPE: Final[str] = "E_RESULT_TYPE"
E_ABSTRACT_CATEGORY: Final[str] = "E_ABSTRACT_CATEGORY"
E_TRANSFORMER_MISSING: Final[str] = "E_TRANSFORMER_MISSING"
E_NOT_REGISTERED: Final[str] = "E_NOT_REGISTERED"
E_DUPLICATE_ENTRY: Final[str] = "E_DUPLICATE_ENTRY"
E_AMBIGUOUS_ENTRY: Final[str] = "E_AMBIGUOUS_ENTRY"
E_REGISTRY_SEALED: Final[str] = "E_REGISTRY_SEALED"
E_UNSUPPORTED_OPERATOR: Final[str] = "E_UNSUPPORTED_OPERATOR"
E_DECLARATION_MISMATCH: Final[str] = "E_DECLARATION_MISMATCH"


# =============================================================================
# ИЕРАРХИЯ
# =============================================================================


class UnitsError(Exception):
    """Базовая ошибка typedunits."""

    def __init__(self, code: str, message: str, path: Optional[str] = None) -> None:
        self.code = code
        self.message = message
        self.path = path
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.path:
            return f"{self.code}: {self.message} ({self.path})"
        return f"{self.code}: {self.message}"


class UnitTypeError(UnitsError, TypeError):
    """Значение не того unit-типа (или голый primitive вне conversion scope)."""


class OperatorNotDeclaredError(UnitTypeError):
    """Для пары (op, left, right) нет записи в operator table."""

    def __init__(self, op: str, left: str, right: str) -> None:
        self.op = op
        self.left = left
        self.right = right
        super().__init__(
            E_OPERATOR_UNDECLARED,
            f"Operator '{op}' is not declared for ({left}, {right})",
            path=f"{left} {op} {right}",
        )


class TransformerNotFoundError(UnitsError, LookupError):
    """Ни override, ни category default не зарегистрированы для типа."""


class RegistryError(UnitsError, ValueError):
    """Некорректное построение реестра: дубликаты, неоднозначность, sealed."""


class DeclarationMismatchError(RegistryError):
    """Типизированные методы классов расходятся с runtime operator table."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__(
            E_DECLARATION_MISMATCH,
            "; ".join(self.problems),
        )
