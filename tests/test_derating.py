import pytest

from breaker_sizing.config import EngineSettings
from breaker_sizing.derating import DeratingComposer
from breaker_sizing.errors import StandardsLookupError
from breaker_sizing.models import EnvironmentalConditions, InstallationMethod, Severity, Standard
from breaker_sizing.standards_tables import StandardsTable


@pytest.fixture
def composer(table):
    return DeratingComposer(table)


def test_nec_temperature_and_grouping(composer):
    conditions = EnvironmentalConditions(ambient_temp_c=40, grouped_conductors=5)
    composition = composer.compose(conditions, Standard.NEC)
    factors = composition.derating_set.factors
    assert [f.label for f in factors] == ["Ambient temperature", "Grouping"]
    assert factors[0].factor == 0.88
    assert factors[1].factor == 0.80
    assert composition.combined_factor == pytest.approx(0.704)
    assert composition.warnings == ()


def test_significant_derating_threshold_is_configurable(table):
    composer = DeratingComposer(table, EngineSettings(derating_warning_threshold=0.75))
    composition = composer.compose(
        EnvironmentalConditions(ambient_temp_c=40, grouped_conductors=5), Standard.NEC
    )
    assert [w.code for w in composition.warnings] == ["SIGNIFICANT_DERATING"]
    assert composition.warnings[0].severity is Severity.WARNING


def test_heavy_derating_warns_at_default_threshold(composer):
    composition = composer.compose(
        EnvironmentalConditions(ambient_temp_c=50, grouped_conductors=8), Standard.NEC
    )
    assert composition.combined_factor == pytest.approx(0.75 * 0.70)
    assert [w.code for w in composition.warnings] == ["SIGNIFICANT_DERATING"]


def test_interpolated_factor_traces_two_rows(composer):
    factor = composer.temperature_factor(37.5, 75, Standard.NEC)
    assert factor.factor == pytest.approx(0.91)
    assert len(factor.table_rows) == 2
    assert factor.citation == "NEC Table 310.15(B)(1), 75°C conductors"


def test_nec_70c_insulation_uses_75c_column(composer):
    assert composer.temperature_factor(40, 70, Standard.NEC).factor == 0.88
    assert composer.temperature_factor(40, 90, Standard.NEC).factor == 0.91


def test_iec_temperature_columns(composer):
    assert composer.temperature_factor(40, 75, Standard.IEC).factor == 0.87
    assert composer.temperature_factor(40, 90, Standard.IEC).factor == 0.91
    assert composer.temperature_factor(20, 70, Standard.IEC).factor == 1.00


@pytest.mark.parametrize("standard", [Standard.NEC, Standard.IEC])
def test_cold_ambient_is_tabulated(composer, standard):
    composition = composer.compose(EnvironmentalConditions(ambient_temp_c=-10), standard)
    factor = composition.derating_set.factors[0]
    assert factor.factor == 1.00
    assert not factor.extrapolated
    assert composition.warnings == ()


@pytest.mark.parametrize("method,conductors,expected", [
    (InstallationMethod.C, 9, 0.79),
    (None, 9, 0.79),
    (InstallationMethod.E, 6, 0.88),
    (InstallationMethod.A1, 12, 0.65),
])
def test_iec_grouping_by_circuits_and_method(composer, method, conductors, expected):
    factor = composer.grouping_factor(conductors, method, Standard.IEC)
    assert factor.factor == pytest.approx(expected)
    assert not factor.extrapolated


def test_iec_grouping_interpolates_between_rows(composer):
    # 30 conductors -> 10 circuits, between the 9 and 12 rows of column B
    factor = composer.grouping_factor(30, InstallationMethod.B1, Standard.IEC)
    assert factor.factor == pytest.approx(0.70 + (0.65 - 0.70) / 3)
    assert factor.table_rows == ((9.0, 0.70), (12.0, 0.65))


def test_extrapolation_clamps_and_warns(composer):
    conditions = EnvironmentalConditions(ambient_temp_c=65, insulation_rating_c=70)
    composition = composer.compose(conditions, Standard.IEC)
    factor = composition.derating_set.factors[0]
    assert factor.factor == 0.50
    assert factor.extrapolated
    assert "DERATING_EXTRAPOLATED" in [w.code for w in composition.warnings]


def test_iec_grouping_beyond_table_clamps(composer):
    composition = composer.compose(EnvironmentalConditions(grouped_conductors=90), Standard.IEC)
    assert composition.derating_set.factors[0].factor == 0.57
    assert [w.code for w in composition.warnings] == ["DERATING_EXTRAPOLATED", "SIGNIFICANT_DERATING"]


def test_installation_method_only_under_iec(composer):
    conditions = EnvironmentalConditions(installation_method=InstallationMethod.D)
    iec = composer.compose(conditions, Standard.IEC)
    assert [f.label for f in iec.derating_set.factors] == ["Installation method"]
    assert iec.derating_set.factors[0].citation.startswith("IEC 60364-5-52")
    nec = composer.compose(conditions, Standard.NEC)
    assert len(nec.derating_set) == 0


def test_absent_conditions_contribute_nothing(composer):
    composition = composer.compose(EnvironmentalConditions(), Standard.NEC)
    assert len(composition.derating_set) == 0
    assert composition.combined_factor == 1.0
    assert composition.warnings == ()


@pytest.mark.parametrize("standard", [Standard.NEC, Standard.IEC])
def test_combined_factor_always_in_unit_interval(composer, standard):
    for temperature in range(-40, 71, 5):
        for grouped in (1, 3, 4, 7, 15, 25, 45, 100):
            conditions = EnvironmentalConditions(
                ambient_temp_c=temperature,
                grouped_conductors=grouped,
                installation_method=InstallationMethod.E,
            )
            combined = composer.compose(conditions, standard).combined_factor
            assert 0 < combined <= 1


def test_factor_above_one_in_table_is_rejected():
    table = StandardsTable({
        "curves": {"ambient_temperature": {"NEC.75": {"points": [[30, 1.2], [40, 1.0]]}}}
    })
    with pytest.raises(StandardsLookupError):
        DeratingComposer(table).compose(EnvironmentalConditions(ambient_temp_c=35), Standard.NEC)
