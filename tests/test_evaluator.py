"""
Unit tests for the evaluator.

Covers simple min/max classification, the LSI and RSI default bands and
their configured overrides, and omission of missing values.
"""

import pytest
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.schemas import WaterSystem
from tools.evaluation.action_table import build_action_table, default_entry, override_entry
from tools.evaluation.evaluator import evaluate_parameter, evaluate_values, suggested_actions
from tools.evaluation.parameter_resolver import resolve_parameter_specs
from tools.evaluation.parameter_spec import BoundShape


class TestSimpleParameters:
    """Test below/within/above classification"""

    def setup_method(self):
        self.entry = override_entry("cooling", "ph", BoundShape.min_max(7.0, 8.0))

    def test_above_max(self):
        result = evaluate_parameter("ph", 8.2, self.entry)
        assert result.classification == "above_max"
        assert result.action_text.startswith("Reduce pH")
        assert result.target_description == "7 - 8"

    def test_below_min(self):
        result = evaluate_parameter("ph", 6.9, self.entry)
        assert result.classification == "below_min"
        assert result.action_text.startswith("Increase pH")

    @pytest.mark.parametrize("value", [7.0, 7.5, 8.0])
    def test_within_range_including_bounds(self, value):
        result = evaluate_parameter("ph", value, self.entry)
        assert result.classification == "within_range"
        assert result.action_text is None

    def test_numeric_string(self):
        assert evaluate_parameter("ph", " 8.5 ", self.entry).current_value == 8.5

    def test_zero_max_bound(self):
        entry = override_entry("cooling", "hardness", BoundShape.max_only(0))
        assert evaluate_parameter("hardness", 0, entry).classification == "within_range"
        assert evaluate_parameter("hardness", 0.1, entry).classification == "above_max"


class TestMissingValues:
    """Missing or non-finite values produce no result"""

    @pytest.mark.parametrize("value", [None, "", "  ", "n/a", float("nan"), float("inf")])
    def test_omitted(self, value):
        entry = default_entry("cooling", "ph")
        assert evaluate_parameter("ph", value, entry) is None

    def test_no_entry(self):
        assert evaluate_parameter("chloride", 120, None) is None


class TestLsiDefaultBands:
    """LSI without configured bounds uses the five reference bands"""

    def setup_method(self):
        self.entry = default_entry("cooling", "lsi")

    def test_corrosion_tendency(self):
        result = evaluate_parameter("lsi", -1.0, self.entry)
        assert result.classification == "band:1"
        assert result.band_label == "Corrosion tendency"
        assert result.action_text.startswith("Corrosion tendency")

    def test_balanced(self):
        result = evaluate_parameter("lsi", 0, self.entry)
        assert result.classification == "band:3"
        assert result.band_label == "Balanced"
        assert result.action_text is None
        assert result.severity == "ok"

    @pytest.mark.parametrize("value,expected", [
        (-0.51, "band:1"),
        (-0.5, "band:2"),
        (-0.01, "band:2"),
        (0.01, "band:4"),
        (0.5, "band:4"),
        (2.01, "band:5"),
    ])
    def test_breakpoints(self, value, expected):
        assert evaluate_parameter("lsi", value, self.entry).classification == expected

    @pytest.mark.parametrize("value", [0.51, 1.0, 2.0])
    def test_unlabeled_gap_is_within_range(self, value):
        result = evaluate_parameter("lsi", value, self.entry)
        assert result.classification == "within_range"
        assert result.action_text is None


class TestLsiOverride:
    """Configured LSI bounds give binary below/within/above"""

    def setup_method(self):
        self.entry = override_entry("cooling", "lsi", BoundShape.index_band(-0.5, 0.5))

    @pytest.mark.parametrize("value", [-0.5, -0.2, 0, 0.3, 0.5])
    def test_within_bounds_idempotent(self, value):
        first = evaluate_parameter("lsi", value, self.entry)
        second = evaluate_parameter("lsi", value, self.entry)
        assert first.classification == "within_range"
        assert first.action_text is None
        assert first == second

    def test_below_is_corrosion(self):
        result = evaluate_parameter("lsi", -0.6, self.entry)
        assert result.classification == "below_min"
        assert result.action_text.startswith("Corrosion tendency")

    def test_above_is_heavy_scale(self):
        result = evaluate_parameter("lsi", 0.6, self.entry)
        assert result.classification == "above_max"
        assert result.action_text.startswith("Heavy scale forming")


class TestRsiDefaultBands:
    """RSI without configured bounds uses the six reference bands"""

    @pytest.mark.parametrize("value,label", [
        (4.0, "Heavy scale"),
        (4.8, "Heavy scale"),
        (6.0, "Light scale"),
        (7.0, "Light scale or corrosion"),
        (7.5, "Corrosion"),
        (9.0, "Heavy corrosion"),
        (9.01, "Intolerable corrosion"),
    ])
    def test_bands(self, value, label):
        result = evaluate_parameter("rsi", value, default_entry("cooling", "rsi"))
        assert result.band_label == label


class TestRsiOverride:
    """Configured RSI bounds: one classification per value"""

    def setup_method(self):
        self.entry = override_entry("cooling", "rsi", BoundShape.ratio_band(6.0, 7.0))

    def test_total_ordering(self):
        values = [x / 10 for x in range(30, 120)]
        for value in values:
            first = evaluate_parameter("rsi", value, self.entry).classification
            second = evaluate_parameter("rsi", value, self.entry).classification
            assert first == second
            if value < 6.0:
                assert first == "below_min"
            elif value <= 7.0:
                assert first == "within_range"
            else:
                assert first == "above_max"

    def test_heavy_corrosion_reused_beyond_span(self):
        at_span = evaluate_parameter("rsi", 9.0, self.entry)
        beyond = evaluate_parameter("rsi", 11.0, self.entry)
        assert at_span.action_text == beyond.action_text
        assert at_span.action_text.startswith("Heavy corrosion tendency")


class TestEvaluateValues:
    """Test evaluation across a whole table"""

    def test_table_order_and_omission(self):
        ws = WaterSystem(
            id=10, name="CT-1", system_type="cooling",
            ph_min=7.0, ph_max=8.0, tds_min=500, tds_max=2500, hardness_max=500,
        )
        table = build_action_table("cooling", resolve_parameter_specs(water_system=ws))
        results = evaluate_values(table, {"hardness": 600, "ph": 8.2, "tds": "", "chloride": 120})

        assert [r.key for r in results] == ["ph", "hardness"]
        assert [r.key for r in suggested_actions(results)] == ["ph", "hardness"]

    def test_suggested_actions_skip_within_range(self):
        entry = override_entry("cooling", "ph", BoundShape.min_max(7.0, 8.0))
        results = [evaluate_parameter("ph", 7.5, entry)]
        assert suggested_actions(results) == []
