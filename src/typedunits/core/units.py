"""
UnitValue — Базовые newtype-значения и root categories

Каждый unit-тип хранит ровно один primitive (один slot) и статически
отличается от primitive и от всех остальных unit-типов.

Иерархия строго двухуровневая:
- root category (DoubleBased, StringBased, IntBased) — маркер без данных,
  задаёт primitive и разрешает generic операции (unwrap, сложение одного типа)
- concrete type (Velocity, TString1, ...) — прямой наследник ровно одной
  root category, объявляет ``__slots__ = ()``

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Concrete type не добавляет полей (``__slots__ = ()``)
2. Нет неявной конверсии между unit-типами и с primitive
3. Равенство и порядок — только внутри одного concrete type
4. Значения immutable
"""

from functools import total_ordering
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Optional, TypeVar

from .errors import (
    E_ABSTRACT_CATEGORY,
    E_NOT_REGISTERED,
    E_UNIT_MISMATCH,
    RegistryError,
    UnitTypeError,
)

if TYPE_CHECKING:
    from .registry import UnitRegistry


_P = TypeVar("_P")
_U = TypeVar("_U", bound="UnitValue[Any]")


# =============================================================================
# BASE
# =============================================================================


@total_ordering
class UnitValue(Generic[_P]):
    """
    Newtype над primitive.

    Операторы:
    - ``a + b`` — только для значений одного concrete type (generic sum)
    - ``a * b`` — только для пар, объявленных в operator table реестра;
      concrete type объявляет типизированный ``__mul__`` для своих пар
    """

    __slots__ = ("_value",)

    # Заполняются в __init_subclass__ / UnitRegistry.register
    primitive: ClassVar[type]
    category: ClassVar[type["UnitValue[Any]"]]
    __unit_registry__: ClassVar[Optional["UnitRegistry"]] = None
    __unit_declared__: ClassVar[bool] = False

    _value: _P

    def __init_subclass__(cls, primitive: Optional[type] = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        slots = cls.__dict__.get("__slots__")
        if slots is None or tuple(slots) != ():
            raise TypeError(
                f"{cls.__name__} must declare __slots__ = () "
                f"(unit types share the representation of their primitive)"
            )

        if primitive is not None:
            # Root category
            if cls.__bases__ != (UnitValue,):
                raise TypeError(f"Root category {cls.__name__} must derive from UnitValue directly")
            cls.primitive = primitive
            cls.category = cls
            return

        parent = cls.__bases__[0] if len(cls.__bases__) == 1 else None
        if parent is None or parent is UnitValue or not is_root_category(parent):
            raise TypeError(
                f"{cls.__name__} must derive from exactly one root category "
                f"(unit hierarchies are two levels deep)"
            )
        cls.category = parent

    def __init__(self, value: _P) -> None:
        cls = type(self)
        if is_root_category(cls) or cls is UnitValue:
            raise UnitTypeError(
                E_ABSTRACT_CATEGORY,
                f"{cls.__name__} is a root category and has no values of its own",
            )
        object.__setattr__(self, "_value", _check_primitive(cls, value))

    # -------------------------------------------------------------------------
    # immutability
    # -------------------------------------------------------------------------

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self) -> tuple[Any, ...]:
        cls = type(self)
        if cls.__dict__.get("__unit_declared__", False):
            # Тип из UnitRegistry.declare() не привязан к имени модуля
            raise TypeError(
                f"{cls.__name__} was declared at runtime and cannot be pickled; "
                f"declare it as a module-level class instead"
            )
        return (cls, (self._value,))

    def __copy__(self: _U) -> _U:
        return self

    def __deepcopy__(self: _U, memo: dict[int, Any]) -> _U:
        return self

    # -------------------------------------------------------------------------
    # equality / ordering (same concrete type only)
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bool(self._value == other._value)  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__qualname__, self._value))

    def __lt__(self: _U, other: _U) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bool(self._value < other._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __str__(self) -> str:
        return str(self._value)

    # -------------------------------------------------------------------------
    # arithmetic
    # -------------------------------------------------------------------------

    def __add__(self: _U, other: _U) -> _U:
        return self._apply("+", other)

    def _apply(self, op: str, other: Any) -> Any:
        return operators_of(type(self)).apply(op, self, other)

    if not TYPE_CHECKING:
        # Runtime fallback для пар без типизированного объявления:
        # type checker их не видит, поэтому необъявленные комбинации
        # отвергаются статически, а здесь через OperatorTable.

        def __mul__(self, other):
            return self._apply("*", other)

        def __radd__(self, other):
            return operators_of(type(self)).apply("+", other, self)

        def __rmul__(self, other):
            return operators_of(type(self)).apply("*", other, self)

    def unwrap(self) -> _P:
        return self._value


# =============================================================================
# ROOT CATEGORIES
# =============================================================================


class DoubleBased(UnitValue[float], primitive=float):
    """Root category для физических величин (float)."""

    __slots__ = ()

    def as_double(self) -> float:
        return self._value


class StringBased(UnitValue[str], primitive=str):
    """Root category для строковых newtype."""

    __slots__ = ()

    def as_string(self) -> str:
        return self._value


class IntBased(UnitValue[int], primitive=int):
    """Root category для целочисленных newtype."""

    __slots__ = ()

    def as_int(self) -> int:
        return self._value


# =============================================================================
# HELPERS
# =============================================================================


def is_root_category(cls: type) -> bool:
    """True для DoubleBased/StringBased/IntBased и других root categories."""
    return isinstance(cls, type) and issubclass(cls, UnitValue) and cls.__dict__.get("category") is cls


def is_unit_type(cls: Any) -> bool:
    """True для concrete unit-типа (не root category)."""
    return isinstance(cls, type) and issubclass(cls, UnitValue) and cls is not UnitValue and not is_root_category(cls)


def operators_of(cls: type[UnitValue[Any]]):
    registry = cls.__unit_registry__
    if registry is None:
        raise RegistryError(
            E_NOT_REGISTERED,
            f"{cls.__name__} is not registered in any UnitRegistry",
            path=cls.__name__,
        )
    return registry.operators


def _check_primitive(cls: type[UnitValue[Any]], value: Any) -> Any:
    if isinstance(value, UnitValue):
        raise UnitTypeError(
            E_UNIT_MISMATCH,
            f"Cannot construct {cls.__name__} from {type(value).__name__}; unwrap explicitly",
            path=cls.__name__,
        )

    primitive = cls.primitive
    if primitive is float:
        # int → float как в числовой башне; bool не считается числом
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise UnitTypeError(
                E_UNIT_MISMATCH,
                f"{cls.__name__} expects float, got {type(value).__name__}",
                path=cls.__name__,
            )
        return float(value)

    if primitive is int and isinstance(value, bool):
        raise UnitTypeError(
            E_UNIT_MISMATCH,
            f"{cls.__name__} expects int, got bool",
            path=cls.__name__,
        )

    if not isinstance(value, primitive):
        raise UnitTypeError(
            E_UNIT_MISMATCH,
            f"{cls.__name__} expects {primitive.__name__}, got {type(value).__name__}",
            path=cls.__name__,
        )
    return value
