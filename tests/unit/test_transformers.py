"""
Тесты для TransformerTable

Проверяет:
1. Most-specific-wins: override → category default
2. Sibling types без override используют default
3. Totality: verify() ловит concrete type без resolution
4. Правила регистрации (root category, дубликаты, sealed)
"""

import pytest

from typedunits.core import (
    DoubleBased,
    IntBased,
    RegistryError,
    StringBased,
    TransformerNotFoundError,
    UnitRegistry,
    describe,
)
from typedunits.core.errors import E_DUPLICATE_ENTRY, E_REGISTRY_SEALED, E_TRANSFORMER_MISSING


@pytest.fixture
def registry():
    registry = UnitRegistry("colors")

    @registry.register
    class Red(StringBased):
        __slots__ = ()

    @registry.register
    class Blue(StringBased):
        __slots__ = ()

    @registry.register
    class Count(IntBased):
        __slots__ = ()

    return registry


class TestResolution:
    """override → default → TransformerNotFoundError"""

    def test_default_applies_to_all_siblings(self, registry) -> None:
        registry.transformers.register_default(StringBased, lambda v: f"color {v.as_string()}")
        Red, Blue = registry.get("Red"), registry.get("Blue")

        assert registry.transformers.describe(Red("r")) == "color r"
        assert registry.transformers.describe(Blue("b")) == "color b"

    def test_override_wins_over_default(self, registry) -> None:
        Red, Blue = registry.get("Red"), registry.get("Blue")
        registry.transformers.register_default(StringBased, lambda v: "default")
        registry.transformers.register_override(Blue, lambda v: "blue")

        assert registry.transformers.describe(Blue("x")) == "blue"
        # Override не влияет на sibling type
        assert registry.transformers.describe(Red("x")) == "default"

    def test_override_without_default(self, registry) -> None:
        Blue = registry.get("Blue")
        registry.transformers.register_override(Blue, lambda v: "blue")
        assert registry.transformers.resolve(Blue)(Blue("x")) == "blue"

        with pytest.raises(TransformerNotFoundError) as excinfo:
            registry.transformers.resolve(registry.get("Red"))
        assert excinfo.value.code == E_TRANSFORMER_MISSING

    def test_default_is_per_category(self, registry) -> None:
        registry.transformers.register_default(StringBased, lambda v: "string")
        with pytest.raises(TransformerNotFoundError):
            registry.transformers.resolve(registry.get("Count"))

    def test_foreign_type_not_resolved(self, registry) -> None:
        """Default реестра не распространяется на типы другого реестра"""
        from typedunits.domain.labels import TString1

        registry.transformers.register_default(StringBased, lambda v: "string")
        with pytest.raises(TransformerNotFoundError):
            registry.transformers.resolve(TString1)

    def test_not_found_is_lookup_error(self, registry) -> None:
        with pytest.raises(LookupError):
            registry.transformers.resolve(registry.get("Red"))

    def test_module_level_describe(self, registry) -> None:
        registry.transformers.register_default(IntBased, lambda v: f"n={v.as_int()}")
        Count = registry.get("Count")
        assert describe(Count(3)) == "n=3"

    def test_describe_unregistered_type(self) -> None:
        class Loose(DoubleBased):
            __slots__ = ()

        with pytest.raises(TransformerNotFoundError):
            describe(Loose(1.0))


class TestDecorators:
    """default()/override() возвращают функцию без изменений"""

    def test_decorators(self, registry) -> None:
        Red = registry.get("Red")

        @registry.transformers.default(StringBased)
        def any_color(value) -> str:
            return "any"

        @registry.transformers.override(Red)
        def red_color(value) -> str:
            return "red"

        assert any_color(None) == "any"
        assert registry.transformers.defaults() == {StringBased: any_color}
        assert registry.transformers.overrides() == {Red: red_color}
        assert registry.transformers.has_default(StringBased)
        assert not registry.transformers.has_default(IntBased)


class TestTotality:
    """verify(): каждая участвующая category покрыта целиком"""

    def test_verify_passes_with_default(self, registry) -> None:
        registry.transformers.register_default(StringBased, lambda v: "s")
        registry.transformers.verify()

    def test_verify_fails_for_uncovered_sibling(self, registry) -> None:
        """Override только для Blue: Red остаётся без resolution"""
        registry.transformers.register_override(registry.get("Blue"), lambda v: "blue")
        with pytest.raises(TransformerNotFoundError) as excinfo:
            registry.transformers.verify()
        assert excinfo.value.path == "Red"

    def test_verify_ignores_unused_categories(self, registry) -> None:
        """IntBased не участвует в таблице: Count не проверяется"""
        registry.transformers.register_default(StringBased, lambda v: "s")
        registry.transformers.verify()

    def test_verify_explicit_types(self, registry) -> None:
        with pytest.raises(TransformerNotFoundError):
            registry.transformers.verify([registry.get("Count")])

    def test_seal_runs_verify(self, registry) -> None:
        registry.transformers.register_override(registry.get("Blue"), lambda v: "blue")
        with pytest.raises(TransformerNotFoundError):
            registry.seal()
        assert not registry.sealed


class TestRegistration:
    """Правила регистрации transformers"""

    def test_default_requires_root_category(self, registry) -> None:
        with pytest.raises(TypeError):
            registry.transformers.register_default(registry.get("Red"), lambda v: "x")

    def test_duplicate_default_rejected(self, registry) -> None:
        registry.transformers.register_default(StringBased, lambda v: "a")
        with pytest.raises(RegistryError) as excinfo:
            registry.transformers.register_default(StringBased, lambda v: "b")
        assert excinfo.value.code == E_DUPLICATE_ENTRY

    def test_duplicate_override_rejected(self, registry) -> None:
        Red = registry.get("Red")
        registry.transformers.register_override(Red, lambda v: "a")
        with pytest.raises(RegistryError):
            registry.transformers.register_override(Red, lambda v: "b")

    def test_override_requires_registered_type(self, registry) -> None:
        from typedunits.domain.labels import TString1

        with pytest.raises(RegistryError):
            registry.transformers.register_override(TString1, lambda v: "x")

    def test_sealed_registry_rejects_transformers(self, registry) -> None:
        registry.transformers.register_default(StringBased, lambda v: "s")
        registry.seal()
        with pytest.raises(RegistryError) as excinfo:
            registry.transformers.register_default(IntBased, lambda v: "i")
        assert excinfo.value.code == E_REGISTRY_SEALED
