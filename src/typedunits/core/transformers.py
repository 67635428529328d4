"""
TransformerTable — Двухуровневый dispatch "значение → описание"

Уровни:
1. override для точного concrete type
2. default для root category этого типа

Override всегда выигрывает; sibling types без override продолжают
использовать default. Глубже двух уровней иерархии нет.
"""

from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, TypeVar

from .errors import E_DUPLICATE_ENTRY, E_TRANSFORMER_MISSING, RegistryError, TransformerNotFoundError
from .logging import logger
from .units import UnitValue, is_root_category

if TYPE_CHECKING:
    from .registry import UnitRegistry


Transformer = Callable[[Any], str]
_F = TypeVar("_F", bound=Callable[..., str])


class TransformerTable:
    """Transformer table одного UnitRegistry."""

    def __init__(self, registry: "UnitRegistry"):
        self._registry = registry
        self._defaults: dict[type, Transformer] = {}
        self._overrides: dict[type, Transformer] = {}

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register_default(self, category: type, fn: Transformer) -> Transformer:
        """Default transformer для всех concrete types root category."""
        self._registry.ensure_open()
        if not is_root_category(category):
            raise TypeError(f"{category!r} is not a root category")
        if category in self._defaults:
            raise RegistryError(
                E_DUPLICATE_ENTRY,
                f"Default transformer for {category.__name__} already registered",
                path=category.__name__,
            )
        self._defaults[category] = fn
        logger.debug(f"[{self._registry.name}] transformer default {category.__name__} -> {_fn_name(fn)}")
        return fn

    def register_override(self, concrete_type: type, fn: Transformer) -> Transformer:
        """Override для точного concrete type (приоритет над default)."""
        self._registry.ensure_open()
        self._registry.require(concrete_type)
        if concrete_type in self._overrides:
            raise RegistryError(
                E_DUPLICATE_ENTRY,
                f"Override transformer for {concrete_type.__name__} already registered",
                path=concrete_type.__name__,
            )
        self._overrides[concrete_type] = fn
        logger.debug(f"[{self._registry.name}] transformer override {concrete_type.__name__} -> {_fn_name(fn)}")
        return fn

    def default(self, category: type) -> Callable[[_F], _F]:
        """Декоратор-форма register_default."""

        def decorator(fn: _F) -> _F:
            self.register_default(category, fn)
            return fn

        return decorator

    def override(self, concrete_type: type) -> Callable[[_F], _F]:
        """Декоратор-форма register_override."""

        def decorator(fn: _F) -> _F:
            self.register_override(concrete_type, fn)
            return fn

        return decorator

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    def resolve(self, concrete_type: type) -> Transformer:
        """
        Most-specific-wins: override → category default.

        Raises:
            TransformerNotFoundError: ни override, ни default
        """
        fn = self._overrides.get(concrete_type)
        if fn is not None:
            return fn

        category = getattr(concrete_type, "category", None)
        if self._registry.is_registered(concrete_type) and category in self._defaults:
            return self._defaults[category]

        name = getattr(concrete_type, "__name__", repr(concrete_type))
        raise TransformerNotFoundError(
            E_TRANSFORMER_MISSING,
            f"No transformer registered for {name} or its root category",
            path=name,
        )

    def describe(self, value: UnitValue[Any]) -> str:
        return self.resolve(type(value))(value)

    def has_default(self, category: type) -> bool:
        return category in self._defaults

    def defaults(self) -> dict[type, Transformer]:
        return dict(self._defaults)

    def overrides(self) -> dict[type, Transformer]:
        return dict(self._overrides)

    # =========================================================================
    # TOTALITY
    # =========================================================================

    def verify(self, types: Optional[Iterable[type]] = None) -> None:
        """
        Проверить, что transformer разрешается для каждого типа.

        По умолчанию проверяются все concrete types каждой category, которая
        участвует в таблице (имеет default или override хотя бы для одного типа):
        capability должна покрывать category целиком.

        Raises:
            TransformerNotFoundError: первый тип без resolution
        """
        if types is None:
            in_use = set(self._defaults) | {cls.category for cls in self._overrides}
            types = [cls for cls in self._registry.concrete_types() if cls.category in in_use]
        for cls in types:
            self.resolve(cls)


def describe(value: UnitValue[Any]) -> str:
    """
    Описание значения через transformer table его реестра.

    Принимает любой UnitValue, поэтому отсутствие transformer'а здесь
    ловится только во время выполнения (TransformerNotFoundError).
    Статическую проверку дают типизированные точки входа доменов,
    например typedunits.domain.labels.describe.
    """
    registry = type(value).__unit_registry__
    if registry is None:
        name = type(value).__name__
        raise TransformerNotFoundError(
            E_TRANSFORMER_MISSING,
            f"{name} is not registered in any UnitRegistry",
            path=name,
        )
    return registry.transformers.describe(value)


def _fn_name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", repr(fn))
