"""
OperatorTable — Закрытая таблица типизированных операций

Таблица (op, left, right) → result фиксирована при импорте доменного модуля:
- явные записи: ``Acceleration * Time -> Velocity``
- generic sum: ``T + T -> T`` для каждого зарегистрированного T
- scalar rule: ``Constant * T -> T`` для каждого T той же root category

Записи независимы и асимметричны: ``Time * Acceleration`` не следует из
``Acceleration * Time``.

Порядок разрешения: явная запись → generic sum → scalar rule → ошибка.
Пересечение явной записи с generic правилом запрещено, поэтому разрешение
всегда однозначно.
"""

import operator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Final, Optional

from .conversions import coerce
from .errors import (
    E_AMBIGUOUS_ENTRY,
    E_DUPLICATE_ENTRY,
    E_PRIMITIVE_OPERAND,
    E_UNSUPPORTED_OPERATOR,
    OperatorNotDeclaredError,
    RegistryError,
    UnitTypeError,
)
from .logging import logger
from .units import UnitValue

if TYPE_CHECKING:
    from .registry import UnitRegistry


SUPPORTED_OPERATORS: Final[frozenset[str]] = frozenset({"+", "*"})

UnitType = type[UnitValue[Any]]


# =============================================================================
# ENTRY
# =============================================================================


@dataclass(frozen=True)
class OperatorEntry:
    """Запись таблицы. compute работает с unwrapped primitives."""

    op: str
    left: UnitType
    right: UnitType
    result: UnitType
    compute: Callable[[Any, Any], Any]

    @property
    def key(self) -> tuple[str, UnitType, UnitType]:
        return (self.op, self.left, self.right)

    def __call__(self, left: UnitValue[Any], right: UnitValue[Any]) -> UnitValue[Any]:
        return self.result(self.compute(left.unwrap(), right.unwrap()))

    def describe(self) -> str:
        return f"{self.left.__name__} {self.op} {self.right.__name__} -> {self.result.__name__}"


# =============================================================================
# TABLE
# =============================================================================


class OperatorTable:
    """Operator dispatch table одного UnitRegistry."""

    def __init__(self, registry: "UnitRegistry"):
        self._registry = registry
        self._entries: dict[tuple[str, UnitType, UnitType], OperatorEntry] = {}
        self._scalar: Optional[UnitType] = None
        self._scalar_compute: Callable[[Any, Any], Any] = operator.mul

    # -------------------------------------------------------------------------
    # registration
    # -------------------------------------------------------------------------

    def register(
        self,
        op: str,
        left: UnitType,
        right: UnitType,
        result: UnitType,
        compute: Callable[[Any, Any], Any],
    ) -> OperatorEntry:
        """
        Объявить операцию ``left op right -> result``.

        Args:
            op: "+" или "*"
            left, right, result: зарегистрированные concrete types
            compute: арифметика над primitives, результат оборачивается в result

        Raises:
            RegistryError: дубликат ключа, пересечение с generic правилом,
                неизвестный оператор/тип, реестр sealed
        """
        self._registry.ensure_open()
        _check_operator(op)
        for cls in (left, right, result):
            self._registry.require(cls)

        entry = OperatorEntry(op=op, left=left, right=right, result=result, compute=compute)
        if entry.key in self._entries:
            raise RegistryError(
                E_DUPLICATE_ENTRY,
                f"Operator entry already declared: {self._entries[entry.key].describe()}",
                path=entry.describe(),
            )
        if self._covered_by_generic_rule(op, left, right):
            raise RegistryError(
                E_AMBIGUOUS_ENTRY,
                f"{entry.describe()} overlaps a generic rule",
                path=entry.describe(),
            )

        self._entries[entry.key] = entry
        logger.debug(f"[{self._registry.name}] operator {entry.describe()}")
        return entry

    def register_scalar(
        self,
        scalar: UnitType,
        compute: Callable[[Any, Any], Any] = operator.mul,
    ) -> None:
        """
        Назначить pure scalar type: ``scalar * T -> T`` для всех T его category.

        Raises:
            RegistryError: scalar уже назначен или есть явная запись
                ``scalar * X`` внутри той же category
        """
        self._registry.ensure_open()
        self._registry.require(scalar)
        if self._scalar is not None:
            raise RegistryError(
                E_DUPLICATE_ENTRY,
                f"Scalar type already designated: {self._scalar.__name__}",
                path=scalar.__name__,
            )
        for entry in self._entries.values():
            if entry.op == "*" and entry.left is scalar and entry.right.category is scalar.category:
                raise RegistryError(
                    E_AMBIGUOUS_ENTRY,
                    f"{entry.describe()} overlaps the scalar rule for {scalar.__name__}",
                    path=entry.describe(),
                )

        self._scalar = scalar
        self._scalar_compute = compute
        logger.debug(f"[{self._registry.name}] scalar {scalar.__name__} * T -> T")

    # -------------------------------------------------------------------------
    # queries
    # -------------------------------------------------------------------------

    @property
    def scalar_type(self) -> Optional[UnitType]:
        return self._scalar

    def entries(self) -> tuple[OperatorEntry, ...]:
        """Явные записи в порядке объявления (без generic правил)."""
        return tuple(self._entries.values())

    def entry(self, op: str, left: UnitType, right: UnitType) -> Optional[OperatorEntry]:
        """Явная запись по точному ключу (generic правила не учитываются)."""
        return self._entries.get((op, left, right))

    def declares(self, op: str, left: UnitType, right: UnitType) -> bool:
        try:
            self.resolve(op, left, right)
        except OperatorNotDeclaredError:
            return False
        return True

    def resolve(self, op: str, left: UnitType, right: UnitType) -> OperatorEntry:
        """
        Найти единственную применимую запись для (op, left, right).

        Raises:
            OperatorNotDeclaredError: комбинация не объявлена
        """
        entry = self._entries.get((op, left, right))
        if entry is not None:
            return entry

        registered = self._registry.is_registered(left) and self._registry.is_registered(right)
        if registered and op == "+" and left is right:
            return OperatorEntry(op="+", left=left, right=left, result=left, compute=operator.add)

        if (
            registered
            and op == "*"
            and self._scalar is not None
            and left is self._scalar
            and right.category is left.category
        ):
            return OperatorEntry(op="*", left=left, right=right, result=right, compute=self._scalar_compute)

        raise OperatorNotDeclaredError(op, _name(left), _name(right))

    # -------------------------------------------------------------------------
    # apply
    # -------------------------------------------------------------------------

    def apply(self, op: str, left: Any, right: Any) -> Any:
        """
        Выполнить ``left op right``.

        Голый primitive допускается только в conversion scope:
        для "+" он оборачивается в тип другого операнда, для "*" — в scalar type.

        Raises:
            OperatorNotDeclaredError: комбинация не объявлена
            UnitTypeError: primitive операнд вне conversion scope
        """
        _check_operator(op)
        left, right = self._coerce_operands(op, left, right)
        entry = self.resolve(op, type(left), type(right))
        return entry(left, right)

    def _coerce_operands(self, op: str, left: Any, right: Any) -> tuple[UnitValue[Any], UnitValue[Any]]:
        left_is_unit = isinstance(left, UnitValue)
        right_is_unit = isinstance(right, UnitValue)
        if left_is_unit and right_is_unit:
            return left, right
        if not left_is_unit and not right_is_unit:
            raise UnitTypeError(
                E_PRIMITIVE_OPERAND,
                f"At least one operand of '{op}' must be a unit value",
            )

        unit = left if left_is_unit else right
        if op == "+":
            target: Optional[UnitType] = type(unit)
        else:
            target = self._scalar
        if target is None:
            raise UnitTypeError(
                E_PRIMITIVE_OPERAND,
                f"Registry {self._registry.name!r} has no scalar type to wrap a bare operand of '*'",
            )

        if left_is_unit:
            return left, coerce(right, target)
        return coerce(left, target), right

    def _covered_by_generic_rule(self, op: str, left: UnitType, right: UnitType) -> bool:
        if op == "+" and left is right:
            return True
        return (
            op == "*"
            and self._scalar is not None
            and left is self._scalar
            and right.category is left.category
        )


def _check_operator(op: str) -> None:
    if op not in SUPPORTED_OPERATORS:
        raise RegistryError(
            E_UNSUPPORTED_OPERATOR,
            f"Unsupported operator {op!r}; expected one of {sorted(SUPPORTED_OPERATORS)}",
            path=op,
        )


def _name(cls: Any) -> str:
    return getattr(cls, "__name__", repr(cls))
