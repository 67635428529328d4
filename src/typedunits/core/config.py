"""
UnitSettings — Конфигурация семейства единиц

Immutable Pydantic модель, привязанная к UnitRegistry.
Значения по умолчанию — строгий режим: implicit conversions выключены,
runtime-проверки включены.
"""

from enum import Enum

from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class ConversionMode(str, Enum):
    """Режим implicit conversions (primitive → unit-тип)."""

    ENABLED = "enabled"
    DISABLED = "disabled"


# =============================================================================
# SETTINGS
# =============================================================================


class UnitSettings(BaseModel):
    """
    Настройки реестра единиц.

    conversion_mode задаёт режим по умолчанию для модуля, объявившего реестр;
    call-site scope (implicit_conversions) имеет приоритет.
    """

    conversion_mode: ConversionMode = Field(
        ConversionMode.DISABLED,
        description="Режим implicit conversions по умолчанию для реестра",
    )
    runtime_checks: bool = Field(
        True,
        description="Проверять unit-аннотации в enforce_units во время выполнения",
    )

    model_config = {"frozen": True}


DEFAULT_SETTINGS = UnitSettings()
