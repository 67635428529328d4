"""
Labels — строковые и целочисленные newtype с transformer table

Transformers:
- StringBased default  → "string transformer: <value>"
- IntBased default     → "int transformer: <value>"
- TString2 override    → "tString2 transformer: <value>"

TString1 использует default своей category, TString2 — override.
"""

from typing import Union

from ..core.registry import UnitRegistry
from ..core.units import IntBased, StringBased

LABELS = UnitRegistry("labels")


# =============================================================================
# UNIT TYPES
# =============================================================================


@LABELS.register
class TString1(StringBased):
    __slots__ = ()


@LABELS.register
class TString2(StringBased):
    __slots__ = ()


@LABELS.register
class TInt(IntBased):
    __slots__ = ()


# =============================================================================
# TRANSFORMERS
# =============================================================================


@LABELS.transformers.default(StringBased)
def string_transformer(value: StringBased) -> str:
    return f"string transformer: {value.as_string()}"


@LABELS.transformers.default(IntBased)
def int_transformer(value: IntBased) -> str:
    return f"int transformer: {value.as_int()}"


@LABELS.transformers.override(TString2)
def tstring2_transformer(value: TString2) -> str:
    return f"tString2 transformer: {value.as_string()}"


LABELS.seal()


# =============================================================================
# TYPED ENTRY POINT
# =============================================================================

# Типы, для которых transformer table разрешается (проверено в seal()).
# describe() принимает только их, поэтому describe(Velocity(...)) не проходит mypy.
Labeled = Union[TString1, TString2, TInt]


def describe(value: Labeled) -> str:
    """
    Описание значения через transformer table LABELS.

    Статически принимает только Labeled; runtime-проверка остаётся
    в TransformerTable.resolve().
    """
    return LABELS.transformers.describe(value)
