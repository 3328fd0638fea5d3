"""Shared fixtures: the packaged standards table and an engine with a fixed clock."""

import copy

import pytest

from breaker_sizing.config import EngineSettings
from breaker_sizing.engine import CalculationEngine
from breaker_sizing.models import (
    Duty,
    InputParameters,
    LoadMode,
    Phase,
    Standard,
)
from breaker_sizing.standards_tables import StandardsTable, merge_catalogs

FIXED_TIME = "2024-01-01T00:00:00+00:00"


@pytest.fixture(scope="session")
def catalog_data():
    return merge_catalogs()


@pytest.fixture(scope="session")
def table(catalog_data):
    return StandardsTable(catalog_data)


@pytest.fixture
def catalog_copy(catalog_data):
    """Mutable deep copy of the packaged catalogs for building fixture tables."""
    return copy.deepcopy(catalog_data)


@pytest.fixture
def engine(table):
    return CalculationEngine(table, EngineSettings(), clock=lambda: FIXED_TIME)


@pytest.fixture
def scenario1_params():
    """7.2 kW, 240 V single-phase, unity power factor, continuous under NEC."""
    return InputParameters(
        standard=Standard.NEC,
        voltage_v=240,
        phase=Phase.SINGLE,
        load_mode=LoadMode.POWER,
        load_value=7.2,
        power_factor=1.0,
        duty=Duty.CONTINUOUS,
    )


@pytest.fixture
def scenario1_record():
    return {
        "standard": "NEC",
        "voltage": 240,
        "phase": "single",
        "load_mode": "power",
        "load_value": 7.2,
        "power_factor": 1.0,
        "duty": "continuous",
    }
