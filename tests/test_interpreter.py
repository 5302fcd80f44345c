import pytest

from spinecheck.schemas.analysis import AnalysisResult, Classification
from spinecheck.services.interpreter import ANGLE_PLACEHOLDER, format_angle, interpret


@pytest.mark.parametrize(
    "classification, tier",
    [
        ("Normal", "ok"),
        ("Mild", "warning"),
        ("High-Risk", "danger"),
        ("HIGH-RISK", "danger"),
        ("high-risk", "danger"),
        (" mild ", "warning"),
        ("Inconclusive", "neutral"),
    ],
)
def test_known_classifications(classification, tier):
    assert interpret(classification).tier == tier


@pytest.mark.parametrize("value", ["foo", "", None, "High Risk", "정상"])
def test_unknown_values_fall_back_to_neutral(value):
    interpretation = interpret(value)

    assert interpretation.tier == "neutral"
    assert interpretation.text_key == "result.check"


def test_mild_recommends_consultation():
    assert "상담을 권장" in interpret("Mild").text
    assert "consultation" in interpret("Mild", lang="en").text


def test_inconclusive_asks_for_retake():
    assert interpret("Inconclusive").text_key == "result.inconclusive"


def test_format_angle():
    mild = AnalysisResult(cobb_angle=14.3, classification=Classification.MILD, captured_at="2026-10-17")
    inconclusive = AnalysisResult(cobb_angle=-1, classification=Classification.INCONCLUSIVE, captured_at="2026-10-17")

    normal = AnalysisResult(cobb_angle=4, classification=Classification.NORMAL, captured_at="2026-10-17")

    assert format_angle(mild) == "14.3"
    assert format_angle(normal) == "4.0"
    assert format_angle(inconclusive) == ANGLE_PLACEHOLDER
    assert format_angle(None) == ""


def test_inconclusive_requires_sentinel():
    with pytest.raises(ValueError):
        AnalysisResult(cobb_angle=5, classification=Classification.INCONCLUSIVE, captured_at="2026-10-17")


@pytest.mark.parametrize("angle", [float("nan"), float("inf")])
def test_non_finite_angle_rejected(angle):
    with pytest.raises(ValueError):
        AnalysisResult(cobb_angle=angle, classification=Classification.NORMAL, captured_at="2026-10-17")
