"""
typedunits — типизированные единицы (newtype) с проверяемым dispatch операторов

Недопустимые комбинации (``Velocity * Velocity``, ``Energy + Velocity``)
отвергаются статически (mypy); во время выполнения — UnitTypeError.

Доменные семейства импортируются явно:
- from typedunits.domain.physics import Velocity, Acceleration, Time, velocity
- from typedunits.domain.labels import TString1, TString2
"""

from .core import (
    ConversionMode,
    DoubleBased,
    IntBased,
    OperatorNotDeclaredError,
    RegistryError,
    StringBased,
    TransformerNotFoundError,
    UnitRegistry,
    UnitSettings,
    UnitsError,
    UnitTypeError,
    UnitValue,
    coerce,
    describe,
    enforce_units,
    implicit_conversions,
)
from .core.logging import logger

logger.disable(__name__)

__version__ = "0.1.0"

__all__ = [
    "UnitValue",
    "DoubleBased",
    "StringBased",
    "IntBased",
    "UnitRegistry",
    "UnitSettings",
    "ConversionMode",
    "implicit_conversions",
    "coerce",
    "enforce_units",
    "describe",
    "UnitsError",
    "UnitTypeError",
    "OperatorNotDeclaredError",
    "TransformerNotFoundError",
    "RegistryError",
]
