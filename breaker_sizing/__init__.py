"""
Circuit breaker sizing per NEC and IEC.

Typical use:

    table = StandardsTable.load()
    engine = CalculationEngine(table)
    result = engine.calculate(parse_design(record, table=table))
"""

from .config import EngineSettings, load_settings
from .engine import CalculationEngine, quick_breaker_lookup, recalculate_with_standard
from .errors import (
    BreakerSizingError,
    ConfigError,
    ContractViolation,
    InvalidUnit,
    StandardsLookupError,
    ValidationFailed,
)
from .models import (
    BaseDesign,
    CableRun,
    CalculationResult,
    EnvironmentalConditions,
    EnvironmentalDesign,
    InputParameters,
    design_input,
)
from .standards_tables import StandardsTable
from .validation import parse_design, validate

__version__ = "1.0.0"
