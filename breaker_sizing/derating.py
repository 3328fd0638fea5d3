"""
Derating Module
Environmental correction factors combined into one DeratingSet.

Implements:
- Ambient temperature correction (NEC 310.15(B)(1), IEC Table B.52.14)
- Grouping correction (NEC 310.15(C)(1) bands, IEC Table B.52.17 curves)
- Installation method factor (IEC 60364-5-52 only)

Each factor records the one or two table rows it came from. Readings
outside a table clamp to the boundary row and produce a warning.

Standards: NEC 2023 Article 310, IEC 60364-5-52
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import EngineSettings
from .errors import StandardsLookupError, unhandled
from .models import (
    CalculationWarning,
    DeratingFactor,
    DeratingSet,
    EnvironmentalConditions,
    InstallationMethod,
    Severity,
    Standard,
)
from .standards_tables import StandardsTable

logger = logging.getLogger(__name__)

# Insulation rating -> temperature correction column
NEC_TEMPERATURE_COLUMNS = {60: "60", 70: "75", 75: "75", 90: "90"}
IEC_TEMPERATURE_COLUMNS = {60: "70", 70: "70", 75: "70", 90: "90"}

# Reference method -> Table B.52.17 grouping column
IEC_GROUPING_COLUMNS = {
    InstallationMethod.A1: "A",
    InstallationMethod.A2: "A",
    InstallationMethod.B1: "B",
    InstallationMethod.B2: "B",
    InstallationMethod.C: "C",
    InstallationMethod.D: "C",
    InstallationMethod.E: "E",
    InstallationMethod.F: "E",
    InstallationMethod.G: "E",
}
IEC_DEFAULT_GROUPING_COLUMN = "B"


@dataclass(frozen=True)
class Composition:
    derating_set: DeratingSet
    warnings: Tuple[CalculationWarning, ...] = ()

    @property
    def combined_factor(self) -> float:
        return self.derating_set.combined_factor


class DeratingComposer:
    """Looks up and multiplies the correction factors for one circuit."""

    def __init__(self, table: StandardsTable, settings: Optional[EngineSettings] = None):
        self.table = table
        self.settings = settings or EngineSettings()

    def compose(self, conditions: EnvironmentalConditions, standard: Standard) -> Composition:
        """
        Build the DeratingSet for the conditions that are present.

        Args:
            conditions: Environmental conditions; None fields contribute nothing
            standard: NEC or IEC

        Returns:
            Composition with the ordered factors and any warnings
        """
        factors: List[DeratingFactor] = []
        warnings: List[CalculationWarning] = []

        if conditions.ambient_temp_c is not None:
            factors.append(self.temperature_factor(
                conditions.ambient_temp_c, conditions.insulation_rating_c, standard
            ))

        if conditions.grouped_conductors is not None:
            factors.append(self.grouping_factor(
                conditions.grouped_conductors, conditions.installation_method, standard
            ))

        if conditions.installation_method is not None and standard is Standard.IEC:
            factors.append(self.installation_factor(conditions.installation_method))

        for f in factors:
            if f.extrapolated:
                warnings.append(CalculationWarning(
                    Severity.WARNING, "DERATING_EXTRAPOLATED",
                    f"{f.label} input {f.input_value} is outside the table range; "
                    f"clamped to boundary factor {f.factor:.2f}",
                    f.citation
                ))

        derating_set = DeratingSet(tuple(factors))
        combined = derating_set.combined_factor
        threshold = self.settings.derating_warning_threshold
        if factors and combined < threshold:
            warnings.append(CalculationWarning(
                Severity.WARNING, "SIGNIFICANT_DERATING",
                f"Combined derating factor {combined:.3f} is below {threshold:.2f}; "
                "re-verify the installation conditions or consider a larger conductor",
                "; ".join(f.citation for f in factors)
            ))

        logger.debug("Derating %s: %d factor(s), combined %.4f", standard.value, len(factors), combined)
        return Composition(derating_set, tuple(warnings))

    # ------------------------------------------------------------------
    # Individual factors
    # ------------------------------------------------------------------

    def temperature_factor(
        self,
        ambient_temp_c: float,
        insulation_rating_c: int,
        standard: Standard
    ) -> DeratingFactor:
        if standard is Standard.NEC:
            column = NEC_TEMPERATURE_COLUMNS.get(insulation_rating_c, "75")
        elif standard is Standard.IEC:
            column = IEC_TEMPERATURE_COLUMNS.get(insulation_rating_c, "70")
        else:
            unhandled(standard)

        curve = self.table.curve("ambient_temperature", f"{standard.value}.{column}")
        reading = curve.interpolate(ambient_temp_c)
        return DeratingFactor(
            label="Ambient temperature",
            factor=_checked(reading.value, curve.category, curve.key),
            citation=curve.citation,
            input_value=ambient_temp_c,
            table_rows=reading.rows,
            extrapolated=reading.clamped,
        )

    def grouping_factor(
        self,
        conductors: int,
        method: Optional[InstallationMethod],
        standard: Standard
    ) -> DeratingFactor:
        if standard is Standard.NEC:
            bands = self.table.bands("grouping", "NEC")
            reading = bands.lookup(conductors)
            return DeratingFactor(
                label="Grouping",
                factor=_checked(reading.value, bands.category, bands.key),
                citation=bands.citation,
                input_value=conductors,
                table_rows=((reading.band.low, reading.band.factor),),
                extrapolated=reading.clamped,
            )
        elif standard is Standard.IEC:
            # Table B.52.17 is indexed by circuits; three conductors per circuit
            circuits = math.ceil(conductors / 3)
            column = IEC_GROUPING_COLUMNS.get(method, IEC_DEFAULT_GROUPING_COLUMN)
            curve = self.table.curve("grouping", f"IEC.{column}")
            reading = curve.interpolate(circuits)
            return DeratingFactor(
                label="Grouping",
                factor=_checked(reading.value, curve.category, curve.key),
                citation=curve.citation,
                input_value=conductors,
                table_rows=reading.rows,
                extrapolated=reading.clamped,
            )
        unhandled(standard)

    def installation_factor(self, method: InstallationMethod) -> DeratingFactor:
        entry = self.table.entry("installation_method", f"IEC.{method.value}")
        return DeratingFactor(
            label="Installation method",
            factor=_checked(entry.value, entry.category, entry.key),
            citation=entry.citation,
            input_value=method.value,
        )


def _checked(value: float, category: str, key: str) -> float:
    if not 0 < value <= 1:
        raise StandardsLookupError(f"Derating factor {value} from {category}/{key} is outside (0, 1]")
    return value
