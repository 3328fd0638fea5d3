"""
Trip Curve Module
Trip characteristic guidance by load type.

IEC miniature breakers are classed by magnetic trip band (B, C, D, K, Z);
NEC/UL breakers by trip unit type. The choice follows the inrush expected
from the load.

Standards: IEC 60898-1, IEC 60947-2, UL 489, NEC 430.52
"""

from .models import LoadType, Standard, TripCurveRecommendation
from .standards_tables import StandardsTable


def recommend_trip_curve(
    table: StandardsTable,
    standard: Standard,
    load_type: LoadType
) -> TripCurveRecommendation:
    """
    Recommend a trip characteristic for the load.

    Args:
        table: Standards table with trip_selection and trip_curve records
        standard: NEC or IEC
        load_type: Resistive, inductive, mixed or capacitive

    Returns:
        TripCurveRecommendation
    """
    selection = table.record("trip_selection", f"{standard.value}.{load_type.value}")
    curve = str(selection["curve"])
    details = table.record("trip_curve", f"{standard.value}.{curve}")
    return TripCurveRecommendation(
        standard=standard,
        recommendation=curve,
        display_name=str(details["display_name"]),
        inrush_capability=str(details["inrush_capability"]),
        rationale=str(selection["rationale"]),
        applications=tuple(details.get("applications", ())),
        notes=str(details.get("notes", "")),
        citation=str(details.get("citation", "")),
    )
