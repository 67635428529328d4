"""
UnitRegistry — Реестр семейства unit-типов

Единственная точка, через которую concrete types попадают в семейство
(Physics, Labels, ...). Реестр владеет operator table и transformer table
своего семейства и после seal() закрыт для изменений: набор типов и
операций фиксируется при импорте доменного модуля.
"""

from typing import Any, Optional, TypeVar

from .config import DEFAULT_SETTINGS, UnitSettings
from .dispatch import OperatorTable
from .errors import (
    E_DUPLICATE_ENTRY,
    E_NOT_REGISTERED,
    E_REGISTRY_SEALED,
    E_UNIT_MISMATCH,
    RegistryError,
    UnitTypeError,
)
from .logging import logger
from .transformers import TransformerTable
from .units import UnitValue, is_root_category, is_unit_type

_U = TypeVar("_U", bound=UnitValue[Any])


class UnitRegistry:
    """
    Реестр unit-типов одного семейства.

    Пример:
        PHYSICS = UnitRegistry("physics")

        @PHYSICS.register
        class Velocity(DoubleBased):
            __slots__ = ()
    """

    def __init__(self, name: str, settings: Optional[UnitSettings] = None):
        self.name = name
        self.settings = settings if settings is not None else DEFAULT_SETTINGS
        self._types: dict[str, type[UnitValue[Any]]] = {}
        self._sealed = False
        self.operators = OperatorTable(self)
        self.transformers = TransformerTable(self)

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return f"UnitRegistry({self.name!r}, types={len(self._types)}, {state})"

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register(self, cls: type[_U]) -> type[_U]:
        """
        Объявить concrete unit-тип в реестре (используется как декоратор).

        Raises:
            RegistryError: реестр sealed, тип уже зарегистрирован
                (здесь или в другом реестре), имя занято
            TypeError: cls не concrete unit-тип
        """
        self.ensure_open()
        if not is_unit_type(cls):
            raise TypeError(f"{cls!r} is not a concrete unit type (root categories cannot be registered)")

        owner = cls.__dict__.get("__unit_registry__")
        if owner is not None:
            raise RegistryError(
                E_DUPLICATE_ENTRY,
                f"{cls.__name__} is already registered in {owner.name!r}",
                path=cls.__name__,
            )
        if cls.__name__ in self._types:
            raise RegistryError(
                E_DUPLICATE_ENTRY,
                f"Unit type name {cls.__name__!r} is already taken in {self.name!r}",
                path=cls.__name__,
            )

        cls.__unit_registry__ = self
        self._types[cls.__name__] = cls
        logger.debug(f"[{self.name}] registered {cls.__name__} <: {cls.category.__name__}")
        return cls

    def declare(self, name: str, category: type[_U]) -> type[_U]:
        """
        Создать и зарегистрировать concrete type во время выполнения.

        Type checker видит результат только как category, поэтому
        статические гарантии для таких типов слабее, чем для объявленных классов.
        Значения таких типов копируются, но не pickle-ятся: класс не доступен
        по имени модуля.
        """
        if not is_root_category(category):
            raise TypeError(f"{category!r} is not a root category")
        cls = type(
            name,
            (category,),
            {"__slots__": (), "__module__": __name__, "__qualname__": name, "__unit_declared__": True},
        )
        return self.register(cls)

    # =========================================================================
    # CONSTRUCT / UNWRAP
    # =========================================================================

    def construct(self, cls: type[_U], primitive: Any) -> _U:
        """Primitive → concrete type. Тотальна для primitive своей категории."""
        self.require(cls)
        return cls(primitive)

    def unwrap(self, value: UnitValue[Any]) -> Any:
        """Unit-значение → primitive (универсальный escape hatch)."""
        if not isinstance(value, UnitValue):
            raise UnitTypeError(
                E_UNIT_MISMATCH,
                f"Expected a unit value, got {type(value).__name__}",
            )
        self.require(type(value))
        return value.unwrap()

    # =========================================================================
    # QUERIES
    # =========================================================================

    def is_registered(self, cls: Any) -> bool:
        return is_unit_type(cls) and cls.__dict__.get("__unit_registry__") is self

    def require(self, cls: Any) -> None:
        if not self.is_registered(cls):
            name = getattr(cls, "__name__", repr(cls))
            raise RegistryError(
                E_NOT_REGISTERED,
                f"{name} is not registered in {self.name!r}",
                path=name,
            )

    def concrete_types(self, category: Optional[type] = None) -> tuple[type[UnitValue[Any]], ...]:
        """Все concrete types (опционально — одной root category), в порядке регистрации."""
        if category is None:
            return tuple(self._types.values())
        return tuple(cls for cls in self._types.values() if cls.category is category)

    def categories(self) -> tuple[type[UnitValue[Any]], ...]:
        seen: dict[type[UnitValue[Any]], None] = {}
        for cls in self._types.values():
            seen.setdefault(cls.category, None)
        return tuple(seen)

    def get(self, name: str) -> type[UnitValue[Any]]:
        try:
            return self._types[name]
        except KeyError as exc:
            raise RegistryError(
                E_NOT_REGISTERED,
                f"Unit type {name!r} is not registered in {self.name!r}",
                path=name,
            ) from exc

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def sealed(self) -> bool:
        return self._sealed

    def ensure_open(self) -> None:
        if self._sealed:
            raise RegistryError(
                E_REGISTRY_SEALED,
                f"Registry {self.name!r} is sealed; unit types and tables are fixed",
            )

    def seal(self) -> "UnitRegistry":
        """
        Закрыть реестр.

        Проверяет, что типизированные операторы классов совпадают с operator
        table, и что каждая category с transformer default покрывает все свои
        concrete types. После seal() регистрация невозможна.

        Raises:
            DeclarationMismatchError: расхождение объявлений и таблицы
            TransformerNotFoundError: capability не разрешается для типа
        """
        from ..checks.declarations import verify_declarations

        self.ensure_open()
        verify_declarations(self)
        self.transformers.verify()
        self._sealed = True
        logger.debug(
            f"[{self.name}] sealed: {len(self._types)} types, "
            f"{len(self.operators.entries())} operator entries"
        )
        return self
