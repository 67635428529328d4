"""
Physics — Физические величины как newtype над float

Все величины — concrete types root category DoubleBased.

Operator table (закрытая, асимметричная):
- Acceleration * Time     -> Velocity
- Mass * Velocity         -> Momentum
- Momentum * Velocity     -> Energy
- Constant * T            -> T          (Constant — pure scalar)
- T + T                   -> T          (generic sum)

Любая другая комбинация (``Velocity * Velocity``, ``Energy + Velocity``)
отвергается mypy; во время выполнения — OperatorNotDeclaredError.
"""

import operator
from typing import TypeVar

from pydantic import BaseModel, Field

from ..core.conversions import enforce_units
from ..core.registry import UnitRegistry
from ..core.units import DoubleBased

PHYSICS = UnitRegistry("physics")

_D = TypeVar("_D", bound=DoubleBased)


# =============================================================================
# UNIT TYPES
# =============================================================================


@PHYSICS.register
class Time(DoubleBased):
    """Время, s."""

    __slots__ = ()


@PHYSICS.register
class Velocity(DoubleBased):
    """Скорость, m/s."""

    __slots__ = ()


@PHYSICS.register
class Acceleration(DoubleBased):
    """Ускорение, m/s²."""

    __slots__ = ()

    def __mul__(self, other: Time) -> Velocity:
        return self._apply("*", other)


@PHYSICS.register
class Energy(DoubleBased):
    """Энергия, J."""

    __slots__ = ()


@PHYSICS.register
class Momentum(DoubleBased):
    """Импульс, kg·m/s."""

    __slots__ = ()

    def __mul__(self, other: Velocity) -> Energy:
        return self._apply("*", other)


@PHYSICS.register
class Mass(DoubleBased):
    """Масса, kg."""

    __slots__ = ()

    def __mul__(self, other: Velocity) -> Momentum:
        return self._apply("*", other)


@PHYSICS.register
class Constant(DoubleBased):
    """Безразмерный множитель: ``Constant * T -> T`` для любой величины."""

    __slots__ = ()

    def __mul__(self, other: _D) -> _D:
        return self._apply("*", other)


# =============================================================================
# OPERATOR TABLE
# =============================================================================

PHYSICS.operators.register("*", Acceleration, Time, Velocity, operator.mul)
PHYSICS.operators.register("*", Mass, Velocity, Momentum, operator.mul)
PHYSICS.operators.register("*", Momentum, Velocity, Energy, operator.mul)
PHYSICS.operators.register_scalar(Constant)

PHYSICS.seal()


# =============================================================================
# FORMULAS
# =============================================================================

HALF = Constant(0.5)


@enforce_units
def velocity(u: Velocity, a: Acceleration, t: Time) -> Velocity:
    """v = u + a·t"""
    return u + a * t


@enforce_units
def momentum(m: Mass, v: Velocity) -> Momentum:
    return m * v


@enforce_units
def kinetic_energy(m: Mass, v: Velocity) -> Energy:
    """E = ½·m·v²"""
    return HALF * m * v * v


class MotionContext(BaseModel):
    """
    Явная конфигурация для energy().

    Заменяет неявные контекстные значения: все входы передаются одной моделью.
    """

    energy: Energy = Field(..., description="Начальная энергия")
    mass: Mass = Field(..., description="Масса тела")
    acceleration: Acceleration = Field(..., description="Постоянное ускорение из покоя")
    time: Time = Field(..., description="Длительность разгона")

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


def energy(ctx: MotionContext) -> Energy:
    """
    Полная энергия после разгона из покоя.

    E = E0 + ½·m·(a·t)²
    """
    return ctx.energy + kinetic_energy(ctx.mass, ctx.acceleration * ctx.time)
