"""
Input Validation Module
Range, enumeration and cross-field checks for one circuit record.

validate() reports every offending field at once as FieldErrors and adds
soft advisories as warnings. It never raises for bad input; parse_design()
is the gate that refuses to build a typed design from an invalid record.

Record shape:
    standard, voltage, phase, load_mode, load_value, power_unit,
    power_factor, duty, load_type, unit_system, short_circuit_ka,
    environment: {ambient_temperature, temperature_unit, grouped_conductors,
                  installation_method, insulation_rating}
    cable_run:   {distance, distance_unit, conductor_size {value, unit}, material}

Standards: NEC 210.19(A), NEC 310.15, IEC 60364-5-52, ANSI C84.1, IEC 60038
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Type

from .config import EngineSettings
from .errors import InvalidUnit, ValidationFailed
from .models import (
    BaseDesign,
    CableRun,
    CalculationWarning,
    ConductorMaterial,
    DesignInput,
    Duty,
    EnvironmentalConditions,
    EnvironmentalDesign,
    FieldError,
    InputParameters,
    InstallationMethod,
    LoadMode,
    LoadType,
    Phase,
    Severity,
    Standard,
    UnitSystem,
    ValidationReport,
    design_input,
)
from .standards_tables import StandardsTable
from .unit_conversion import UnitConverter, conductor_size_to_mm2, kind_of, normalize_unit

# Declared ranges (inclusive unless noted)
VOLTAGE_RANGE = (100.0, 1000.0)
LOAD_MAX = 10000.0
POWER_FACTOR_RANGE = (0.5, 1.0)
TEMPERATURE_RANGE_C = (-40.0, 70.0)
GROUPED_RANGE = (1, 100)
DISTANCE_MAX = 10000.0
SHORT_CIRCUIT_MAX_KA = 200.0
INSULATION_RATINGS = (60, 70, 75, 90)

DEFAULT_POWER_FACTOR = 0.8

PHASE_ALIASES = {"1": "single", "3": "three", "single-phase": "single", "three-phase": "three"}


@dataclass(frozen=True)
class _Fields:
    """Parsed values of a record; None where absent or invalid."""
    standard: Optional[Standard] = None
    voltage: Optional[float] = None
    phase: Optional[Phase] = None
    load_mode: Optional[LoadMode] = None
    load_value: Optional[float] = None
    power_unit: str = "kW"
    power_factor: Optional[float] = None
    duty: Optional[Duty] = None
    load_type: Optional[LoadType] = None
    unit_system: Optional[UnitSystem] = None
    short_circuit_ka: Optional[float] = None
    has_environment: bool = False
    ambient_temp_c: Optional[float] = None
    grouped_conductors: Optional[int] = None
    installation_method: Optional[InstallationMethod] = None
    insulation_rating_c: Optional[int] = None
    has_cable_run: bool = False
    distance: Optional[float] = None
    distance_unit: Optional[str] = None
    conductor_size_mm2: Optional[float] = None
    conductor_label: Optional[str] = None
    material: Optional[ConductorMaterial] = None


class Validator:
    """
    Checks raw circuit records.

    The standard-voltage advisory needs a StandardsTable; without one it is
    skipped. Thresholds for the other advisories come from EngineSettings.
    """

    def __init__(
        self,
        table: Optional[StandardsTable] = None,
        settings: Optional[EngineSettings] = None,
        converter: Optional[UnitConverter] = None
    ):
        self.table = table
        self.settings = settings or EngineSettings()
        self.converter = converter or UnitConverter()

    def validate(self, record: Any) -> ValidationReport:
        errors, fields = self._check(as_record(record))
        warnings = self._advisories(fields)
        return ValidationReport(tuple(errors), tuple(warnings))

    def parse_design(self, record: Any) -> DesignInput:
        """
        Validate and build the typed design in canonical units.

        Raises:
            ValidationFailed: Any FieldError was found
        """
        errors, fields = self._check(as_record(record))
        if errors:
            raise ValidationFailed(errors)
        return self._build(fields)

    # ------------------------------------------------------------------
    # Field checks
    # ------------------------------------------------------------------

    def _check(self, record: Mapping[str, Any]):
        errors: List[FieldError] = []
        parsed: Dict[str, Any] = {}

        parsed["standard"] = _enum(record, "standard", Standard, errors, required=True)
        parsed["phase"] = _enum(record, "phase", Phase, errors, required=True, aliases=PHASE_ALIASES)
        parsed["load_mode"] = _enum(record, "load_mode", LoadMode, errors, required=True)
        parsed["duty"] = _enum(record, "duty", Duty, errors, default=Duty.CONTINUOUS)
        parsed["load_type"] = _enum(record, "load_type", LoadType, errors, default=LoadType.MIXED)
        parsed["unit_system"] = _enum(record, "unit_system", UnitSystem, errors, default=UnitSystem.METRIC)

        parsed["voltage"] = _ranged(
            record, "voltage", errors, VOLTAGE_RANGE[0], VOLTAGE_RANGE[1],
            "must be 100–1000", required=True
        )
        parsed["load_value"] = _ranged(
            record, "load_value", errors, 0.0, LOAD_MAX,
            "must be > 0 and ≤ 10000", required=True, exclusive_low=True
        )

        power_unit = record.get("power_unit") or "kW"
        try:
            if kind_of(power_unit) != "power":
                raise InvalidUnit(power_unit)
            parsed["power_unit"] = normalize_unit(power_unit)
        except InvalidUnit:
            errors.append(FieldError("power_unit", power_unit, "must be a power unit (W, kW, hp)"))

        if "power_factor" in record and record["power_factor"] is None:
            parsed["power_factor"] = None
        else:
            record_pf = dict(record)
            record_pf.setdefault("power_factor", DEFAULT_POWER_FACTOR)
            parsed["power_factor"] = _ranged(
                record_pf, "power_factor", errors, POWER_FACTOR_RANGE[0], POWER_FACTOR_RANGE[1],
                "must be 0.5–1.0"
            )

        parsed["short_circuit_ka"] = _ranged(
            record, "short_circuit_ka", errors, 0.0, SHORT_CIRCUIT_MAX_KA,
            "must be > 0 and ≤ 200", exclusive_low=True
        )

        environment = record.get("environment")
        if environment is not None:
            if not isinstance(environment, Mapping):
                errors.append(FieldError("environment", environment, "must be a mapping"))
            else:
                parsed["has_environment"] = True
                parsed.update(self._check_environment(environment, errors))

        cable_run = record.get("cable_run")
        if cable_run is not None:
            if not isinstance(cable_run, Mapping):
                errors.append(FieldError("cable_run", cable_run, "must be a mapping"))
            else:
                parsed["has_cable_run"] = True
                parsed.update(self._check_cable_run(cable_run, parsed["unit_system"], errors))

        # Cross-field checks
        if parsed["load_mode"] is LoadMode.POWER and parsed.get("power_factor") is None \
                and not any(e.field == "power_factor" for e in errors):
            errors.append(FieldError("power_factor", None, "is required when load_mode is power"))

        return errors, _Fields(**parsed)

    def _check_environment(self, env: Mapping[str, Any], errors: List[FieldError]) -> dict:
        out: Dict[str, Any] = {}
        unit = env.get("temperature_unit") or "C"
        unit_ok = True
        try:
            if kind_of(unit) != "temperature":
                raise InvalidUnit(unit)
        except InvalidUnit:
            unit_ok = False
            errors.append(FieldError("environment.temperature_unit", unit, "must be C, F or K"))

        raw = env.get("ambient_temperature")
        if raw is not None:
            value = _number("environment.ambient_temperature", raw, errors)
            if value is not None and unit_ok:
                temp_c = self.converter.to_canonical(value, unit)
                if TEMPERATURE_RANGE_C[0] <= temp_c <= TEMPERATURE_RANGE_C[1]:
                    out["ambient_temp_c"] = temp_c
                else:
                    errors.append(FieldError(
                        "environment.ambient_temperature", raw, "must be -40–70 °C"
                    ))

        raw = env.get("grouped_conductors")
        if raw is not None:
            value = _number("environment.grouped_conductors", raw, errors)
            if value is not None:
                if value != int(value) or not GROUPED_RANGE[0] <= value <= GROUPED_RANGE[1]:
                    errors.append(FieldError(
                        "environment.grouped_conductors", raw, "must be an integer 1–100"
                    ))
                else:
                    out["grouped_conductors"] = int(value)

        out["installation_method"] = _enum(
            env, "installation_method", InstallationMethod, errors, prefix="environment."
        )

        raw = env.get("insulation_rating")
        if raw is None:
            raw = 75
        value = _number("environment.insulation_rating", raw, errors)
        if value is not None:
            if value not in INSULATION_RATINGS:
                errors.append(FieldError(
                    "environment.insulation_rating", raw, "must be one of 60, 70, 75, 90"
                ))
            else:
                out["insulation_rating_c"] = int(value)
        return out

    def _check_cable_run(
        self,
        run: Mapping[str, Any],
        unit_system: Optional[UnitSystem],
        errors: List[FieldError]
    ) -> dict:
        out: Dict[str, Any] = {}
        distance_raw = run.get("distance")
        size_raw = run.get("conductor_size")

        if distance_raw is None or size_raw is None:
            errors.append(FieldError(
                "cable_run.distance, cable_run.conductor_size",
                {"distance": distance_raw, "conductor_size": size_raw},
                "distance and conductor_size are both required for a cable run"
            ))

        default_unit = "ft" if unit_system is UnitSystem.IMPERIAL else "m"
        unit = run.get("distance_unit") or default_unit
        try:
            if kind_of(unit) != "length":
                raise InvalidUnit(unit)
            out["distance_unit"] = normalize_unit(unit)
        except InvalidUnit:
            errors.append(FieldError("cable_run.distance_unit", unit, "must be a length unit (m, ft, ...)"))

        if distance_raw is not None:
            value = _number("cable_run.distance", distance_raw, errors)
            if value is not None:
                # Bound applies to metres whatever unit the run was given in
                length_m = value
                if "distance_unit" in out:
                    length_m = self.converter.to_canonical(value, out["distance_unit"])
                if value > 0 and length_m <= DISTANCE_MAX:
                    out["distance"] = value
                else:
                    errors.append(FieldError("cable_run.distance", distance_raw, "must be > 0 and ≤ 10000 m"))

        if size_raw is not None:
            if isinstance(size_raw, Mapping):
                size_value = size_raw.get("value")
                size_unit = size_raw.get("unit") or "mm2"
            else:
                size_value, size_unit = size_raw, "mm2"
            try:
                if str(size_unit).strip().lower() != "awg":
                    numeric = _number("cable_run.conductor_size", size_value, errors)
                    if numeric is None:
                        raise _Reported()
                    if numeric <= 0:
                        errors.append(FieldError("cable_run.conductor_size", size_value, "must be > 0"))
                        raise _Reported()
                    size_value = numeric
                out["conductor_size_mm2"] = conductor_size_to_mm2(size_value, size_unit)
                out["conductor_label"] = _size_label(size_value, size_unit)
            except InvalidUnit:
                errors.append(FieldError(
                    "cable_run.conductor_size", size_raw, "must be an AWG, kcmil or mm² size"
                ))
            except _Reported:
                pass

        out["material"] = _enum(
            run, "material", ConductorMaterial, errors,
            default=ConductorMaterial.COPPER, prefix="cable_run."
        )
        return out

    # ------------------------------------------------------------------
    # Advisories
    # ------------------------------------------------------------------

    def _advisories(self, f: _Fields) -> List[CalculationWarning]:
        warnings: List[CalculationWarning] = []
        s = self.settings

        if self.table is not None and f.standard is not None and f.voltage is not None:
            ladder = self.table.ladder("standard_voltage", f.standard.value)
            if not ladder.contains(f.voltage):
                nominal = ", ".join(f"{v:g}" for v in ladder.values)
                warnings.append(CalculationWarning(
                    Severity.INFO, "NONSTANDARD_VOLTAGE",
                    f"{f.voltage:g} V is not a standard {f.standard.value} system voltage ({nominal} V)",
                    ladder.citation
                ))

        if f.power_factor is not None and f.power_factor < s.low_power_factor:
            warnings.append(CalculationWarning(
                Severity.WARNING, "LOW_POWER_FACTOR",
                f"Power factor {f.power_factor:g} is below {s.low_power_factor:g}; "
                "consider power factor correction"
            ))

        if f.ambient_temp_c is not None and (
            f.ambient_temp_c > s.extreme_temperature_high_c
            or f.ambient_temp_c < s.extreme_temperature_low_c
        ):
            warnings.append(CalculationWarning(
                Severity.WARNING, "EXTREME_TEMPERATURE",
                f"Ambient temperature {f.ambient_temp_c:.1f} °C is outside "
                f"{s.extreme_temperature_low_c:g} to {s.extreme_temperature_high_c:g} °C; "
                "verify equipment ratings",
                _ambient_citation(f.standard)
            ))

        if f.distance is not None and f.distance_unit is not None:
            if f.unit_system is UnitSystem.IMPERIAL:
                # Round trip through metres must not cross the threshold
                length_ft = round(self.converter.convert(f.distance, f.distance_unit, "ft"), 6)
                long_run = length_ft > s.long_circuit_ft
                shown = f"{length_ft:.0f} ft"
            else:
                length_m = self.converter.to_canonical(f.distance, f.distance_unit)
                long_run = length_m > s.long_circuit_m
                shown = f"{length_m:.0f} m"
            if long_run:
                warnings.append(CalculationWarning(
                    Severity.WARNING, "LONG_CIRCUIT",
                    f"Circuit length {shown} is long; voltage drop may limit the design",
                    "NEC 210.19(A) Informational Note No. 4"
                ))

        if f.standard is Standard.NEC and f.installation_method is not None:
            warnings.append(CalculationWarning(
                Severity.INFO, "METHOD_NOT_APPLICABLE",
                f"Installation method {f.installation_method.value} is an IEC reference method "
                "and is ignored under NEC"
            ))

        return warnings

    # ------------------------------------------------------------------
    # Typed construction
    # ------------------------------------------------------------------

    def _build(self, f: _Fields) -> DesignInput:
        load_value = f.load_value
        if f.load_mode is LoadMode.POWER:
            load_value = self.converter.to_canonical(f.load_value, f.power_unit) / 1000.0

        cable_run = None
        if f.has_cable_run:
            cable_run = CableRun(
                length_m=self.converter.to_canonical(f.distance, f.distance_unit),
                conductor_size_mm2=f.conductor_size_mm2,
                material=f.material,
                size_label=f.conductor_label,
            )

        params = InputParameters(
            standard=f.standard,
            voltage_v=f.voltage,
            phase=f.phase,
            load_mode=f.load_mode,
            load_value=load_value,
            power_factor=f.power_factor if f.power_factor is not None else DEFAULT_POWER_FACTOR,
            duty=f.duty,
            load_type=f.load_type,
            unit_system=f.unit_system,
            short_circuit_ka=f.short_circuit_ka,
            cable_run=cable_run,
        )

        environment = None
        if f.has_environment:
            environment = EnvironmentalConditions(
                ambient_temp_c=f.ambient_temp_c,
                grouped_conductors=f.grouped_conductors,
                installation_method=f.installation_method,
                insulation_rating_c=f.insulation_rating_c or 75,
            )
        return design_input(params, environment)


class _Reported(Exception):
    """Field already has an error recorded."""


# =============================================================================
# MODULE FUNCTIONS
# =============================================================================

def validate(
    record: Any,
    table: Optional[StandardsTable] = None,
    settings: Optional[EngineSettings] = None
) -> ValidationReport:
    """Validate a raw record or typed design. See Validator."""
    return Validator(table, settings).validate(record)


def parse_design(
    record: Any,
    converter: Optional[UnitConverter] = None,
    table: Optional[StandardsTable] = None,
    settings: Optional[EngineSettings] = None
) -> DesignInput:
    """Validate and build a DesignInput; raises ValidationFailed on FieldErrors."""
    return Validator(table, settings, converter).parse_design(record)


def as_record(value: Any) -> Mapping[str, Any]:
    """Flatten InputParameters or a DesignInput to the raw record shape."""
    if isinstance(value, Mapping):
        return value
    if isinstance(value, InputParameters):
        return _params_record(value)
    if isinstance(value, BaseDesign):
        return _params_record(value.params)
    if isinstance(value, EnvironmentalDesign):
        record = _params_record(value.params)
        env = value.environment
        record["environment"] = {
            "ambient_temperature": env.ambient_temp_c,
            "temperature_unit": "C",
            "grouped_conductors": env.grouped_conductors,
            "installation_method": env.installation_method,
            "insulation_rating": env.insulation_rating_c,
        }
        return record
    raise ValidationFailed([FieldError("record", type(value).__name__, "must be a mapping or design input")])


def _params_record(p: InputParameters) -> dict:
    record = {
        "standard": p.standard,
        "voltage": p.voltage_v,
        "phase": p.phase,
        "load_mode": p.load_mode,
        "load_value": p.load_value,
        "power_factor": p.power_factor,
        "duty": p.duty,
        "load_type": p.load_type,
        "unit_system": p.unit_system,
        "short_circuit_ka": p.short_circuit_ka,
    }
    if p.cable_run is not None:
        record["cable_run"] = {
            "distance": p.cable_run.length_m,
            "distance_unit": "m",
            "conductor_size": {"value": p.cable_run.conductor_size_mm2, "unit": "mm2"},
            "material": p.cable_run.material,
        }
    return record


# =============================================================================
# HELPERS
# =============================================================================

def _number(name: str, raw: Any, errors: List[FieldError]) -> Optional[float]:
    if isinstance(raw, bool):
        errors.append(FieldError(name, raw, "must be a number"))
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        errors.append(FieldError(name, raw, "must be a number"))
        return None
    if not math.isfinite(value):
        errors.append(FieldError(name, raw, "must be a finite number"))
        return None
    return value


def _ranged(
    record: Mapping[str, Any],
    name: str,
    errors: List[FieldError],
    low: float,
    high: float,
    constraint: str,
    required: bool = False,
    exclusive_low: bool = False
) -> Optional[float]:
    raw = record.get(name)
    if raw is None:
        if required:
            errors.append(FieldError(name, None, "is required"))
        return None
    value = _number(name, raw, errors)
    if value is None:
        return None
    too_low = value <= low if exclusive_low else value < low
    if too_low or value > high:
        errors.append(FieldError(name, raw, constraint))
        return None
    return value


def _enum(
    record: Mapping[str, Any],
    name: str,
    enum_type: Type,
    errors: List[FieldError],
    required: bool = False,
    default=None,
    aliases: Optional[Mapping[str, str]] = None,
    prefix: str = ""
):
    raw = record.get(name)
    if raw is None:
        if required:
            errors.append(FieldError(prefix + name, None, "is required"))
        return default
    if isinstance(raw, enum_type):
        return raw

    text = str(raw).strip()
    if aliases:
        text = aliases.get(text.lower(), text)
    for member in enum_type:
        if member.value.lower() == text.lower():
            return member

    allowed = ", ".join(m.value for m in enum_type)
    errors.append(FieldError(prefix + name, raw, f"must be one of {allowed}"))
    return default


def _size_label(value: Any, unit: str) -> str:
    key = str(unit).strip().lower()
    if key == "awg":
        return f"{str(value).upper().replace('AWG', '').strip()} AWG"
    if key in ("kcmil", "mcm"):
        return f"{float(value):g} kcmil"
    return f"{float(value):g} {unit}"


def _ambient_citation(standard: Optional[Standard]) -> Optional[str]:
    if standard is Standard.NEC:
        return "NEC Table 310.15(B)(1)"
    if standard is Standard.IEC:
        return "IEC 60364-5-52 Table B.52.14"
    return None
