"""
Implicit conversions — primitive → unit-тип по явному opt-in

По умолчанию конверсий нет: голый primitive там, где ожидается unit-тип,
отвергается mypy статически и UnitTypeError во время выполнения.

Opt-in бывает двух видов:
- call-site scope: ``with implicit_conversions(Velocity, Time): ...``
  (ContextVar, поэтому scope не протекает в другие потоки и asyncio tasks)
- module scope: UnitSettings(conversion_mode=ENABLED) реестра, объявленного
  в модуле; call-site scope имеет приоритет

Глобального переключателя нет.
"""

import functools
import inspect
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, ParamSpec, TypeVar, get_type_hints

from .config import ConversionMode
from .errors import E_PRIMITIVE_OPERAND, E_RESULT_TYPE, E_UNIT_MISMATCH, UnitTypeError
from .logging import logger
from .units import UnitValue, is_unit_type

_U = TypeVar("_U", bound=UnitValue[Any])
_R = TypeVar("_R")
_PS = ParamSpec("_PS")


# =============================================================================
# SCOPE
# =============================================================================


@dataclass(frozen=True)
class ConversionScope:
    """Активный conversion scope."""

    mode: ConversionMode
    # Пустое множество: все unit-типы
    types: frozenset[type] = frozenset()

    def allows(self, target: type) -> bool:
        if self.mode is not ConversionMode.ENABLED:
            return False
        return not self.types or target in self.types


_SCOPE: ContextVar[Optional[ConversionScope]] = ContextVar(
    "typedunits_conversion_scope", default=None
)


@contextmanager
def implicit_conversions(
    *types: type[UnitValue[Any]],
    mode: ConversionMode = ConversionMode.ENABLED,
) -> Iterator[ConversionScope]:
    """
    Call-site scope для implicit conversions.

    Args:
        *types: unit-типы, для которых разрешена конверсия (пусто — все)
        mode: ENABLED или DISABLED (DISABLED перекрывает module scope)
    """
    for target in types:
        if not is_unit_type(target):
            raise TypeError(f"{target!r} is not a concrete unit type")

    scope = ConversionScope(mode=ConversionMode(mode), types=frozenset(types))
    token = _SCOPE.set(scope)
    logger.debug(f"conversion scope entered: mode={scope.mode.value}, types={sorted(t.__name__ for t in types)}")
    try:
        yield scope
    finally:
        _SCOPE.reset(token)
        logger.debug("conversion scope exited")


def current_scope() -> Optional[ConversionScope]:
    return _SCOPE.get()


def conversions_enabled(target: type[UnitValue[Any]]) -> bool:
    """Разрешена ли конверсия primitive → target в текущем контексте."""
    scope = _SCOPE.get()
    if scope is not None:
        return scope.allows(target)
    registry = target.__unit_registry__
    return registry is not None and registry.settings.conversion_mode is ConversionMode.ENABLED


# =============================================================================
# COERCION
# =============================================================================


def coerce(value: Any, target: type[_U]) -> _U:
    """
    Привести value к target.

    - значение target возвращается как есть
    - значение другого unit-типа — всегда ошибка
    - primitive — только при активной конверсии для target

    Raises:
        UnitTypeError: E_UNIT_MISMATCH или E_PRIMITIVE_OPERAND
    """
    if type(value) is target:
        return value
    if isinstance(value, UnitValue):
        raise UnitTypeError(
            E_UNIT_MISMATCH,
            f"Expected {target.__name__}, got {type(value).__name__}",
            path=target.__name__,
        )
    if not conversions_enabled(target):
        raise UnitTypeError(
            E_PRIMITIVE_OPERAND,
            f"Bare {type(value).__name__} where {target.__name__} is expected; "
            f"construct {target.__name__}(...) explicitly or enable implicit conversions",
            path=target.__name__,
        )
    return target(value)


# =============================================================================
# ENFORCE_UNITS
# =============================================================================


def enforce_units(fn: Callable[_PS, _R]) -> Callable[_PS, _R]:
    """
    Runtime-проверка unit-аннотаций функции.

    Параметры, аннотированные concrete unit-типом, проходят через coerce():
    в conversion scope primitive оборачивается, иначе — UnitTypeError.
    Возвращаемое значение сверяется с аннотацией.

    Сигнатура сохраняется для type checker (ParamSpec), поэтому mypy
    по-прежнему отвергает primitive в этих параметрах.
    """
    signature = inspect.signature(fn)
    resolved: Optional[tuple[dict[str, type], Optional[type]]] = None

    def _unit_hints() -> tuple[dict[str, type], Optional[type]]:
        nonlocal resolved
        # Аннотации могут быть forward references, разрешаем их при первом вызове.
        # Кэш публикуется одним присваиванием: конкурентный первый вызов
        # видит либо None, либо готовый tuple.
        cached = resolved
        if cached is None:
            hints = get_type_hints(fn)
            params = {
                name: hint
                for name, hint in hints.items()
                if name != "return" and is_unit_type(hint)
            }
            ret = hints.get("return")
            cached = (params, ret if is_unit_type(ret) else None)
            resolved = cached
        return cached

    @functools.wraps(fn)
    def wrapper(*args: _PS.args, **kwargs: _PS.kwargs) -> _R:
        params, return_type = _unit_hints()
        bound = signature.bind(*args, **kwargs)
        for name, target in params.items():
            if name not in bound.arguments:
                continue
            if not _checks_enabled(target) and not conversions_enabled(target):
                continue
            bound.arguments[name] = coerce(bound.arguments[name], target)

        result = fn(*bound.args, **bound.kwargs)

        if return_type is not None and _checks_enabled(return_type) and type(result) is not return_type:
            raise UnitTypeError(
                E_RESULT_TYPE,
                f"{fn.__qualname__} must return {return_type.__name__}, got {type(result).__name__}",
                path=fn.__qualname__,
            )
        return result

    return wrapper


def _checks_enabled(target: type[UnitValue[Any]]) -> bool:
    registry = target.__unit_registry__
    return registry is None or registry.settings.runtime_checks
