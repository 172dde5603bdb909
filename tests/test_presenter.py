"""
Unit tests for result presentation (status text and colors).
"""

import pytest
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tools.evaluation.presenter import (
    GRAY,
    GREEN,
    RED,
    YELLOW,
    present_classification,
    service_status_color,
    stability_score_color,
)


class TestPresentClassification:
    """Test classification to (status, color)"""

    def test_within_range(self):
        assert present_classification("within_range") == ("Within Range", GREEN)

    def test_out_of_range(self):
        assert present_classification("below_min") == ("Below Range", RED)
        assert present_classification("above_max") == ("Above Range", RED)

    def test_band_uses_label_and_severity(self):
        assert present_classification("band:3", "ok", "Balanced") == ("Balanced", GREEN)
        assert present_classification("band:2", "warning", "Light scale") == ("Light scale", YELLOW)
        assert present_classification("band:6", "critical", "Intolerable corrosion")[1] == RED

    def test_not_measured(self):
        assert present_classification(None) == ("Not measured", GRAY)


class TestServiceColors:
    """Test colors for calculation service output"""

    @pytest.mark.parametrize("status,color", [
        ("Stable", GREEN),
        ("Acceptable", GREEN),
        ("Moderate", YELLOW),
        ("Scaling Likely", RED),
        ("Corrosion Likely", RED),
        ("Unknown", GRAY),
        ("", GRAY),
        (None, GRAY),
    ])
    def test_status_color(self, status, color):
        assert service_status_color(status) == color

    @pytest.mark.parametrize("score,color", [
        (95, GREEN),
        (70, GREEN),
        (69.9, YELLOW),
        (50, YELLOW),
        (49.9, RED),
        (0, RED),
    ])
    def test_stability_score_color(self, score, color):
        assert stability_score_color(score) == color

    def test_no_score(self):
        assert stability_score_color(None) is None
