"""
Result Report Module
Plain-data rendering of a CalculationResult for YAML or JSON output.

Values are rounded for display here; the result itself keeps full
precision. Run lengths are shown in the circuit's display unit system.
"""

import json
from typing import Any, Dict, Optional, TextIO

import yaml

from .load_current import calc_apparent_power_kva
from .models import CalculationResult, EnvironmentalDesign, LoadMode, UnitSystem
from .unit_conversion import UnitConverter


def result_to_dict(result: CalculationResult) -> Dict[str, Any]:
    """
    Convert a result to nested dicts, lists and scalars.

    Enums are rendered as their values.
    """
    params = result.params
    imperial = params.unit_system is UnitSystem.IMPERIAL
    converter = UnitConverter()

    output: Dict[str, Any] = {
        "input": _input_dict(result, imperial, converter),
        "load_current_a": round(result.load_current_a, 2),
        "apparent_power_kva": round(
            calc_apparent_power_kva(result.load_current_a, params.voltage_v, params.phase), 2
        ),
        "safety_factor": result.safety_factor,
        "minimum_rating_a": round(result.minimum_rating_a, 2),
        "adjusted_requirement_a": round(result.adjusted_requirement_a, 2),
        "breaker": {
            "rating_a": result.breaker.rating_a,
            "interrupting_rating_ka": result.breaker.interrupting_rating_ka,
            "trip_characteristic": result.breaker.trip_characteristic,
            "standard": result.breaker.standard.value,
            "code_reference": result.breaker.code_section,
            "is_safe": result.breaker.is_safe,
        },
        "trip_curve": {
            "recommendation": result.trip_curve.recommendation,
            "display_name": result.trip_curve.display_name,
            "inrush_capability": result.trip_curve.inrush_capability,
            "rationale": result.trip_curve.rationale,
            "applications": list(result.trip_curve.applications),
            "notes": result.trip_curve.notes,
            "code_reference": result.trip_curve.citation,
        },
    }

    if result.derating is not None:
        output["derating"] = {
            "combined_factor": round(result.derating.combined_factor, 4),
            "factors": [
                {
                    "label": f.label,
                    "factor": round(f.factor, 4),
                    "input": f.input_value,
                    "table_rows": [list(row) for row in f.table_rows],
                    "extrapolated": f.extrapolated,
                    "code_reference": f.citation,
                }
                for f in result.derating.factors
            ],
        }

    vd = result.voltage_drop
    if vd is not None:
        vd_dict = {
            "voltage_drop_v": round(vd.voltage_drop_v, 2),
            "voltage_drop_pct": round(vd.voltage_drop_pct, 2),
            "voltage_at_load_v": round(vd.voltage_at_load_v, 1),
            "power_loss_w": round(vd.power_loss_w, 1),
            "resistance_ohm_per_m": round(vd.resistance_ohm_per_m, 6),
            "reactance_ohm_per_m": round(vd.reactance_ohm_per_m, 6),
            "limit_branch_pct": vd.limit_branch_pct,
            "limit_combined_pct": vd.limit_combined_pct,
            "status": vd.status,
        }
        if vd.recommended_size_mm2 is not None:
            vd_dict["recommended_size_mm2"] = vd.recommended_size_mm2
            vd_dict["recommended_vd_pct"] = round(vd.recommended_vd_pct, 2)
        output["voltage_drop"] = vd_dict

    sc = result.short_circuit
    if sc is not None:
        output["short_circuit"] = {
            "fault_current_ka": sc.fault_current_ka,
            "interrupting_rating_ka": sc.interrupting_rating_ka,
            "margin_pct": _rounded(sc.margin_pct, 1),
            "adequate": sc.adequate,
            "code_reference": sc.citation,
        }

    output["warnings"] = [
        {
            "severity": w.severity.value,
            "code": w.code,
            "message": w.message,
            "code_reference": w.citation,
        }
        for w in result.warnings
    ]
    output["formulas"] = [
        {
            "stage": f.stage,
            "expression": f.expression,
            "substituted": f.substituted,
            "value": round(f.value, 4),
            "unit": f.unit,
        }
        for f in result.formulas
    ]
    output["notes"] = list(result.notes)
    output["actionable"] = result.actionable
    output["calculation_version"] = result.calculation_version
    output["calculated_at"] = result.calculated_at
    return output


def dump_yaml(result: CalculationResult, stream: Optional[TextIO] = None) -> Optional[str]:
    """YAML text of the result; written to stream if one is given."""
    return yaml.dump(
        result_to_dict(result), stream,
        default_flow_style=False, sort_keys=False, allow_unicode=True
    )


def dump_json(result: CalculationResult, stream: Optional[TextIO] = None) -> Optional[str]:
    """JSON text of the result; written to stream if one is given."""
    data = result_to_dict(result)
    if stream is None:
        return json.dumps(data, indent=2, ensure_ascii=False)
    json.dump(data, stream, indent=2, ensure_ascii=False)
    return None


def _input_dict(result: CalculationResult, imperial: bool, converter: UnitConverter) -> Dict[str, Any]:
    p = result.params
    data: Dict[str, Any] = {
        "standard": p.standard.value,
        "voltage_v": p.voltage_v,
        "phase": p.phase.value,
        "load_mode": p.load_mode.value,
        "load_value": p.load_value,
        "load_unit": "kW" if p.load_mode is LoadMode.POWER else "A",
        "power_factor": p.power_factor,
        "duty": p.duty.value,
        "load_type": p.load_type.value,
        "unit_system": p.unit_system.value,
    }
    if p.short_circuit_ka is not None:
        data["short_circuit_ka"] = p.short_circuit_ka

    run = p.cable_run
    if run is not None:
        run_dict: Dict[str, Any] = {
            "conductor_size_mm2": round(run.conductor_size_mm2, 3),
            "material": run.material.value,
        }
        if imperial:
            run_dict["length_ft"] = round(converter.from_canonical(run.length_m, "ft"), 1)
        else:
            run_dict["length_m"] = round(run.length_m, 1)
        if run.size_label:
            run_dict["size_label"] = run.size_label
        data["cable_run"] = run_dict

    if isinstance(result.design, EnvironmentalDesign):
        env = result.design.environment
        env_dict: Dict[str, Any] = {"insulation_rating_c": env.insulation_rating_c}
        if env.ambient_temp_c is not None:
            if imperial:
                env_dict["ambient_temperature_f"] = round(converter.from_canonical(env.ambient_temp_c, "F"), 1)
            else:
                env_dict["ambient_temperature_c"] = round(env.ambient_temp_c, 1)
        if env.grouped_conductors is not None:
            env_dict["grouped_conductors"] = env.grouped_conductors
        if env.installation_method is not None:
            env_dict["installation_method"] = env.installation_method.value
        data["environment"] = env_dict
    return data


def _rounded(value: Optional[float], digits: int) -> Optional[float]:
    return None if value is None else round(value, digits)
