"""
Core: newtype-значения, реестр, operator и transformer таблицы, конверсии.

Не зависит от конкретных доменов (physics, labels).
"""

from .config import DEFAULT_SETTINGS, ConversionMode, UnitSettings
from .conversions import (
    ConversionScope,
    coerce,
    conversions_enabled,
    current_scope,
    enforce_units,
    implicit_conversions,
)
from .dispatch import SUPPORTED_OPERATORS, OperatorEntry, OperatorTable
from .errors import (
    DeclarationMismatchError,
    OperatorNotDeclaredError,
    RegistryError,
    TransformerNotFoundError,
    UnitsError,
    UnitTypeError,
)
from .registry import UnitRegistry
from .transformers import TransformerTable, describe
from .units import (
    DoubleBased,
    IntBased,
    StringBased,
    UnitValue,
    is_root_category,
    is_unit_type,
)

__all__ = [
    # Values
    "UnitValue",
    "DoubleBased",
    "StringBased",
    "IntBased",
    "is_root_category",
    "is_unit_type",
    # Registry
    "UnitRegistry",
    "UnitSettings",
    "ConversionMode",
    "DEFAULT_SETTINGS",
    # Dispatch
    "OperatorTable",
    "OperatorEntry",
    "SUPPORTED_OPERATORS",
    "TransformerTable",
    "describe",
    # Conversions
    "ConversionScope",
    "implicit_conversions",
    "conversions_enabled",
    "current_scope",
    "coerce",
    "enforce_units",
    # Errors
    "UnitsError",
    "UnitTypeError",
    "OperatorNotDeclaredError",
    "TransformerNotFoundError",
    "RegistryError",
    "DeclarationMismatchError",
]
