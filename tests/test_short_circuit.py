import pytest

from breaker_sizing.models import Severity, Standard
from breaker_sizing.short_circuit import check_short_circuit, select_interrupting_rating


@pytest.mark.parametrize("standard,fault,expected", [
    (Standard.NEC, 8, 10),
    (Standard.NEC, 22, 22),
    (Standard.NEC, 30, 35),
    (Standard.IEC, 8, 10),
    (Standard.IEC, 30, 36),
    (Standard.IEC, 200, 200),
])
def test_smallest_adequate_rating(table, standard, fault, expected):
    analysis = select_interrupting_rating(table, fault, standard)
    assert analysis.interrupting_rating_ka == expected
    assert analysis.adequate
    assert analysis.margin_pct >= 0


def test_fault_above_every_rating(table):
    analysis, warnings, formula = check_short_circuit(table, 250, Standard.NEC)
    assert not analysis.adequate
    assert analysis.interrupting_rating_ka is None
    assert [w.code for w in warnings] == ["INTERRUPTING_RATING_EXCEEDED"]
    assert warnings[0].severity is Severity.ERROR
    assert formula.value == 200


def test_adequate_has_no_warnings(table):
    analysis, warnings, formula = check_short_circuit(table, 14, Standard.NEC)
    assert warnings == []
    assert analysis.margin_pct == 0
    assert formula.substituted == "14 kA ≥ 14 kA"
    assert analysis.citation == "NEC 110.9, UL 489 interrupting ratings"
