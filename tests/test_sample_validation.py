"""
Unit tests for sample value coercion and physical-domain validation.
"""

import pytest
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from utils.sample_validation import SampleValidationError, find_domain_errors, validate_sample
from utils.sample_values import is_present, numeric_values, to_number


class TestSampleValues:
    """Test the definition of 'present'"""

    @pytest.mark.parametrize("raw,expected", [
        (7.2, 7.2),
        (0, 0.0),
        ("0", 0.0),
        (" 12.5 ", 12.5),
        ("1e3", 1000.0),
    ])
    def test_numeric(self, raw, expected):
        assert to_number(raw) == expected

    @pytest.mark.parametrize("raw", [
        None, "", "   ", "abc", True, False, float("nan"), "inf", [1], 10**400,
    ])
    def test_absent(self, raw):
        assert to_number(raw) is None
        assert not is_present(raw)

    def test_numeric_values(self):
        assert numeric_values({"ph": "7.5", "tds": "", "hardness": 0}) == {"ph": 7.5, "hardness": 0.0}


class TestDomainValidation:
    """Test out-of-domain detection"""

    def test_valid_sample(self):
        sample = {"ph": 7.5, "tds": 1200, "cycle": 4, "basin_temperature": 30}
        assert find_domain_errors(sample) == []
        validate_sample(sample)

    def test_ph_out_of_range(self):
        assert find_domain_errors({"ph": 15}) == ["pH must be between 0 and 14 (got 15)"]

    def test_negative_concentration(self):
        assert find_domain_errors({"hardness": -1}) == ["hardness cannot be negative (got -1)"]

    def test_cycles_below_one(self):
        assert find_domain_errors({"cycle": 0.5}) == ["cycle must be at least 1 (got 0.5)"]

    def test_temperature_out_of_range(self):
        errors = find_domain_errors({"basin_temperature": 120})
        assert errors == ["basin temperature must be between 0 and 100 (got 120)"]

    def test_zero_concentration_is_valid(self):
        assert find_domain_errors({"iron": 0, "ph": 0}) == []

    def test_absent_values_are_not_checked(self):
        assert find_domain_errors({"ph": "", "tds": None}) == []

    def test_unknown_keys_are_not_checked(self):
        assert find_domain_errors({"lsi": -3.0}) == []

    def test_validate_sample_raises_with_all_messages(self):
        with pytest.raises(SampleValidationError) as exc_info:
            validate_sample({"ph": -1, "tds": -5})

        assert len(exc_info.value.messages) == 2
        assert isinstance(exc_info.value, ValueError)
        assert "pH must be between 0 and 14" in str(exc_info.value)
