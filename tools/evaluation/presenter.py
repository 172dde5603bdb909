"""
Result presentation: status text and color per classification.

Thin mapping consumed by whatever renders the results table; holds no
decision logic of its own.
"""

from typing import Optional, Tuple

from core.schemas import Classification, is_band_classification

GREEN = "green"
YELLOW = "yellow"
RED = "red"
GRAY = "gray"

SEVERITY_COLORS = {
    "ok": GREEN,
    "warning": YELLOW,
    "critical": RED,
}

# Status strings the calculation service returns for its indices
SERVICE_STATUS_COLORS = {
    "Stable": GREEN,
    "Acceptable": GREEN,
    "Moderate": YELLOW,
    "Scaling Likely": RED,
    "Corrosion Likely": RED,
}


def present_classification(
    classification: Optional[str],
    severity: str = "ok",
    band_label: Optional[str] = None,
) -> Tuple[str, str]:
    """
    Map a classification to (status text, color).

    Example:
        >>> present_classification("above_max")
        ('Above Range', 'red')
    """
    if classification is None:
        return "Not measured", GRAY
    if classification == Classification.WITHIN_RANGE.value:
        return "Within Range", GREEN
    if classification == Classification.BELOW_MIN.value:
        return "Below Range", RED
    if classification == Classification.ABOVE_MAX.value:
        return "Above Range", RED
    if is_band_classification(classification):
        return band_label or classification, SEVERITY_COLORS.get(severity, GRAY)
    return classification, GRAY


def service_status_color(status: Optional[str]) -> str:
    """Color for a status string returned by the calculation service"""
    if not status:
        return GRAY
    return SERVICE_STATUS_COLORS.get(status.strip(), GRAY)


def stability_score_color(score: Optional[float]) -> Optional[str]:
    """Stability score bands: >= 70 green, >= 50 yellow, otherwise red"""
    if score is None:
        return None
    if score >= 70:
        return GREEN
    if score >= 50:
        return YELLOW
    return RED
