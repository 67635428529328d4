"""
Тесты для OperatorTable

Проверяет:
1. Явные записи physics таблицы (unwrap(l op r) == compute(unwrap(l), unwrap(r)))
2. Generic sum (T + T -> T) и scalar rule (Constant * T -> T)
3. Асимметрию и закрытость таблицы: необъявленные пары → OperatorNotDeclaredError
4. Правила построения: дубликаты, пересечение с generic правилами, sealed
"""

import operator

import pytest

from typedunits.core import (
    DoubleBased,
    OperatorNotDeclaredError,
    RegistryError,
    StringBased,
    UnitRegistry,
    UnitTypeError,
)
from typedunits.core.errors import (
    E_AMBIGUOUS_ENTRY,
    E_DUPLICATE_ENTRY,
    E_NOT_REGISTERED,
    E_OPERATOR_UNDECLARED,
    E_PRIMITIVE_OPERAND,
    E_REGISTRY_SEALED,
    E_UNSUPPORTED_OPERATOR,
)
from typedunits.domain.labels import TInt, TString1, TString2
from typedunits.domain.physics import (
    PHYSICS,
    Acceleration,
    Constant,
    Energy,
    Mass,
    Momentum,
    Time,
    Velocity,
)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def open_registry():
    """Открытый реестр с двумя типами без объявленных операций."""
    registry = UnitRegistry("test")

    @registry.register
    class Length(DoubleBased):
        __slots__ = ()

    @registry.register
    class Area(DoubleBased):
        __slots__ = ()

    @registry.register
    class Ratio(DoubleBased):
        __slots__ = ()

    return registry, Length, Area, Ratio


# =============================================================================
# DECLARED ENTRIES
# =============================================================================


class TestPhysicsTable:
    """Явные записи physics таблицы"""

    def test_acceleration_times_time_is_velocity(self) -> None:
        result = Acceleration(10.0) * Time(1.5)
        assert type(result) is Velocity
        assert result.as_double() == 15.0

    def test_mass_times_velocity_is_momentum(self) -> None:
        result = Mass(2.0) * Velocity(3.0)
        assert type(result) is Momentum
        assert result == Momentum(6.0)

    def test_momentum_times_velocity_is_energy(self) -> None:
        result = Momentum(6.0) * Velocity(3.0)
        assert type(result) is Energy
        assert result == Energy(18.0)

    @pytest.mark.parametrize("entry", PHYSICS.operators.entries(), ids=lambda e: e.describe())
    @pytest.mark.parametrize("left,right", [(2.0, 3.0), (-1.5, 4.0), (0.0, 7.0)])
    def test_every_entry_matches_compute(self, entry, left, right) -> None:
        """unwrap(apply(op, l, r)) == compute(unwrap(l), unwrap(r))"""
        result = PHYSICS.operators.apply(entry.op, entry.left(left), entry.right(right))
        assert type(result) is entry.result
        assert result.unwrap() == entry.compute(left, right)

    def test_resolve_returns_unique_entry(self) -> None:
        entry = PHYSICS.operators.resolve("*", Acceleration, Time)
        assert entry.result is Velocity
        assert entry is PHYSICS.operators.entry("*", Acceleration, Time)

    def test_entries_are_fixed(self) -> None:
        keys = {(e.left, e.right, e.result) for e in PHYSICS.operators.entries()}
        assert keys == {
            (Acceleration, Time, Velocity),
            (Mass, Velocity, Momentum),
            (Momentum, Velocity, Energy),
        }


# =============================================================================
# GENERIC RULES
# =============================================================================


class TestGenericSum:
    """T + T -> T для любого зарегистрированного T"""

    @pytest.mark.parametrize("cls", PHYSICS.concrete_types(), ids=lambda c: c.__name__)
    def test_same_type_sum(self, cls) -> None:
        result = cls(1.25) + cls(2.5)
        assert type(result) is cls
        assert result.unwrap() == 3.75

    def test_string_sum_concatenates(self) -> None:
        assert TString1("Hello") + TString1(", world") == TString1("Hello, world")

    def test_int_sum(self) -> None:
        assert TInt(2) + TInt(40) == TInt(42)

    def test_builtin_sum_with_start(self) -> None:
        total = sum([Velocity(1.0), Velocity(2.0), Velocity(3.0)], Velocity(0.0))
        assert total == Velocity(6.0)


class TestScalarRule:
    """Constant * T -> T"""

    def test_scalar_designated(self) -> None:
        assert PHYSICS.operators.scalar_type is Constant

    @pytest.mark.parametrize("cls", PHYSICS.concrete_types(), ids=lambda c: c.__name__)
    def test_constant_times_any_type(self, cls) -> None:
        result = Constant(0.5) * cls(8.0)
        assert type(result) is cls
        assert result == cls(0.5 * 8.0)

    def test_scalar_chain(self) -> None:
        """Constant(0.5) * m * v * v -> Energy"""
        result = Constant(0.5) * Mass(2.0) * Velocity(3.0) * Velocity(3.0)
        assert result == Energy(9.0)


# =============================================================================
# UNDECLARED COMBINATIONS
# =============================================================================


class TestUndeclared:
    """Пары вне таблицы отвергаются"""

    def test_velocity_times_velocity(self) -> None:
        with pytest.raises(OperatorNotDeclaredError) as excinfo:
            Velocity(1.0) * Velocity(2.0)
        assert excinfo.value.code == E_OPERATOR_UNDECLARED
        assert excinfo.value.left == "Velocity"
        assert excinfo.value.right == "Velocity"

    def test_energy_plus_velocity(self) -> None:
        with pytest.raises(OperatorNotDeclaredError):
            Energy(1.0) + Velocity(1.0)

    def test_entries_are_asymmetric(self) -> None:
        """Time * Acceleration не следует из Acceleration * Time"""
        with pytest.raises(OperatorNotDeclaredError):
            Time(1.0) * Acceleration(10.0)

    def test_scalar_only_on_the_left(self) -> None:
        with pytest.raises(OperatorNotDeclaredError):
            Velocity(1.0) * Constant(2.0)

    def test_cross_registry(self) -> None:
        with pytest.raises(OperatorNotDeclaredError):
            PHYSICS.operators.apply("+", Velocity(1.0), TString1("a"))

    def test_sibling_string_types(self) -> None:
        with pytest.raises(OperatorNotDeclaredError):
            TString1("a") + TString2("b")

    def test_undeclared_is_type_error(self) -> None:
        with pytest.raises(TypeError):
            Velocity(1.0) * Velocity(1.0)

    def test_declares(self) -> None:
        table = PHYSICS.operators
        assert table.declares("*", Acceleration, Time)
        assert table.declares("+", Energy, Energy)
        assert table.declares("*", Constant, Mass)
        assert not table.declares("*", Velocity, Velocity)
        assert not table.declares("+", Energy, Velocity)

    def test_unsupported_operator(self) -> None:
        with pytest.raises(RegistryError) as excinfo:
            PHYSICS.operators.apply("-", Velocity(2.0), Velocity(1.0))
        assert excinfo.value.code == E_UNSUPPORTED_OPERATOR

    def test_primitive_operand_outside_scope(self) -> None:
        with pytest.raises(UnitTypeError) as excinfo:
            Velocity(1.0) + 1.0
        assert excinfo.value.code == E_PRIMITIVE_OPERAND

        with pytest.raises(UnitTypeError):
            2.0 * Velocity(1.0)

        with pytest.raises(UnitTypeError):
            1.0 + Velocity(1.0)


# =============================================================================
# REGISTRATION RULES
# =============================================================================


class TestRegistration:
    """Закрытость и однозначность таблицы"""

    def test_register_entry(self, open_registry) -> None:
        registry, Length, Area, _ = open_registry
        entry = registry.operators.register("*", Length, Length, Area, operator.mul)
        assert entry.describe() == "Length * Length -> Area"
        assert registry.operators.apply("*", Length(3.0), Length(4.0)) == Area(12.0)

    def test_duplicate_key_rejected(self, open_registry) -> None:
        registry, Length, Area, Ratio = open_registry
        registry.operators.register("*", Length, Length, Area, operator.mul)
        with pytest.raises(RegistryError) as excinfo:
            registry.operators.register("*", Length, Length, Ratio, operator.mul)
        assert excinfo.value.code == E_DUPLICATE_ENTRY

    def test_same_type_sum_cannot_be_redeclared(self, open_registry) -> None:
        registry, Length, _, _ = open_registry
        with pytest.raises(RegistryError) as excinfo:
            registry.operators.register("+", Length, Length, Length, operator.add)
        assert excinfo.value.code == E_AMBIGUOUS_ENTRY

    def test_entry_overlapping_scalar_rejected(self, open_registry) -> None:
        registry, Length, Area, Ratio = open_registry
        registry.operators.register_scalar(Ratio)
        with pytest.raises(RegistryError) as excinfo:
            registry.operators.register("*", Ratio, Length, Area, operator.mul)
        assert excinfo.value.code == E_AMBIGUOUS_ENTRY

    def test_scalar_overlapping_entry_rejected(self, open_registry) -> None:
        registry, Length, Area, Ratio = open_registry
        registry.operators.register("*", Ratio, Length, Area, operator.mul)
        with pytest.raises(RegistryError) as excinfo:
            registry.operators.register_scalar(Ratio)
        assert excinfo.value.code == E_AMBIGUOUS_ENTRY

    def test_single_scalar(self, open_registry) -> None:
        registry, Length, _, Ratio = open_registry
        registry.operators.register_scalar(Ratio)
        with pytest.raises(RegistryError) as excinfo:
            registry.operators.register_scalar(Length)
        assert excinfo.value.code == E_DUPLICATE_ENTRY

    def test_scalar_stays_within_category(self, open_registry) -> None:
        registry, _, _, Ratio = open_registry

        @registry.register
        class Name(StringBased):
            __slots__ = ()

        registry.operators.register_scalar(Ratio)
        assert not registry.operators.declares("*", Ratio, Name)

    def test_unregistered_type_rejected(self, open_registry) -> None:
        registry, Length, Area, _ = open_registry
        with pytest.raises(RegistryError) as excinfo:
            registry.operators.register("*", Length, Velocity, Area, operator.mul)
        assert excinfo.value.code == E_NOT_REGISTERED

    def test_unsupported_operator_rejected(self, open_registry) -> None:
        registry, Length, Area, _ = open_registry
        with pytest.raises(RegistryError) as excinfo:
            registry.operators.register("/", Area, Length, Length, operator.truediv)
        assert excinfo.value.code == E_UNSUPPORTED_OPERATOR

    def test_sealed_registry_is_closed(self) -> None:
        assert PHYSICS.sealed
        with pytest.raises(RegistryError) as excinfo:
            PHYSICS.operators.register("*", Time, Acceleration, Velocity, operator.mul)
        assert excinfo.value.code == E_REGISTRY_SEALED

        with pytest.raises(RegistryError):
            PHYSICS.operators.register_scalar(Mass)

    def test_unregistered_type_has_no_operators(self) -> None:
        class Loose(DoubleBased):
            __slots__ = ()

        with pytest.raises(RegistryError) as excinfo:
            Loose(1.0) + Loose(2.0)
        assert excinfo.value.code == E_NOT_REGISTERED
