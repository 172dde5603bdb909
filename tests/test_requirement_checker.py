"""
Unit tests for the requirement checker.
"""

from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.schemas import WaterSystem
from tools.evaluation.parameter_resolver import resolve_parameter_specs
from tools.evaluation.requirement_checker import (
    MISSING_INPUT_REASON,
    NOT_CONFIGURED_REASON,
    check_requirements,
    required_keys,
    restrict_sample,
    temperature_required,
)


def cooling_specs(**overrides):
    fields = dict(
        id=10,
        name="CT-1",
        system_type="cooling",
        ph_min=7.0,
        ph_max=8.5,
        tds_min=500,
        tds_max=2500,
        hardness_max=500,
        alkalinity_max=300,
    )
    fields.update(overrides)
    return resolve_parameter_specs(water_system=WaterSystem(**fields))


def boiler_specs():
    ws = WaterSystem(
        id=20,
        name="Boiler 1",
        system_type="boiler",
        ph_min=10.5,
        ph_max=11.5,
        tds_max=3500,
        hardness_max=2,
        m_alkalinity_min=300,
        m_alkalinity_max=700,
    )
    return resolve_parameter_specs(water_system=ws)


COMPLETE_COOLING_SAMPLE = {
    "ph": 7.8,
    "tds": 1200,
    "hardness": 300,
    "alkalinity": 150,
    "basin_temperature": 28,
    "hot_side_temperature": 38,
}


class TestTemperatureCoupling:
    """Temperatures are required only with all four index inputs enabled"""

    def test_all_four_enabled_requires_temperatures(self):
        specs = cooling_specs()

        assert temperature_required(specs)
        assert required_keys(specs) == [
            "ph", "tds", "hardness", "alkalinity",
            "basin_temperature", "hot_side_temperature",
        ]

    def test_missing_alkalinity_drops_temperatures(self):
        specs = cooling_specs(alkalinity_max=None)

        assert not temperature_required(specs)
        assert required_keys(specs) == ["ph", "tds", "hardness"]

    def test_missing_ph_drops_temperatures(self):
        specs = cooling_specs(ph_min=None)
        assert "basin_temperature" not in required_keys(specs)

    def test_boiler_never_asks_for_temperature(self):
        """Exactly the four configured boiler keys are required"""
        assert required_keys(boiler_specs()) == ["ph", "tds", "hardness", "m_alkalinity"]


class TestRequiredKeys:
    """Test which enabled parameters are solicited"""

    def test_enabled_optional_is_required(self):
        specs = cooling_specs(chloride_enabled=True, chloride_max=250)
        assert "chloride" in required_keys(specs)

    def test_disabled_optional_is_not_required(self):
        specs = cooling_specs(chloride_max=250)
        assert "chloride" not in required_keys(specs)

    def test_derived_indices_are_never_required(self):
        specs = cooling_specs(
            lsi_enabled=True, lsi_min=-0.5, lsi_max=0.5,
            chloride_enabled=True, chloride_max=250, lr_max=0.8,
        )
        required = required_keys(specs)
        assert "lsi" not in required
        assert "lr" not in required


class TestCheckRequirements:
    """Test readiness reporting"""

    def test_complete_sample_is_ready(self):
        report = check_requirements(cooling_specs(), COMPLETE_COOLING_SAMPLE)

        assert report.ready
        assert report.missing == []
        assert report.reason is None

    def test_empty_string_is_missing_but_zero_is_present(self):
        sample = dict(COMPLETE_COOLING_SAMPLE, tds="", hardness=0)
        report = check_requirements(cooling_specs(), sample)

        assert not report.ready
        assert report.missing == ["tds"]
        assert report.missing_labels == ["TDS"]
        assert report.reason == MISSING_INPUT_REASON

    def test_numeric_strings_count_as_present(self):
        sample = {key: str(value) for key, value in COMPLETE_COOLING_SAMPLE.items()}
        assert check_requirements(cooling_specs(), sample).ready

    def test_non_numeric_text_is_missing(self):
        sample = dict(COMPLETE_COOLING_SAMPLE, ph="high")
        assert check_requirements(cooling_specs(), sample).missing == ["ph"]

    def test_integer_too_large_for_float_is_missing(self):
        sample = dict(COMPLETE_COOLING_SAMPLE, tds=10**400)
        assert check_requirements(cooling_specs(), sample).missing == ["tds"]

    def test_missing_temperature_labels(self):
        sample = dict(COMPLETE_COOLING_SAMPLE)
        del sample["basin_temperature"]
        del sample["hot_side_temperature"]
        report = check_requirements(cooling_specs(), sample)

        assert report.missing_labels == ["Basin Temperature", "Hot Side Temperature"]

    def test_nothing_configured(self):
        specs = resolve_parameter_specs(water_system=WaterSystem(id=1, name="New", system_type="cooling"))
        report = check_requirements(specs, {"ph": 7.5})

        assert not report.ready
        assert report.required == []
        assert report.reason == NOT_CONFIGURED_REASON

    def test_boiler_scenario(self):
        sample = {"ph": 11.0, "tds": 2800, "hardness": 1, "m_alkalinity": 450}
        report = check_requirements(boiler_specs(), sample)

        assert report.ready
        assert report.required == ["ph", "tds", "hardness", "m_alkalinity"]

    def test_inputs_are_not_mutated(self):
        specs = cooling_specs()
        sample = {"ph": 7.5, "tds": ""}
        check_requirements(specs, sample)
        assert sample == {"ph": 7.5, "tds": ""}


class TestRestrictSample:
    """Test that disabled keys never reach a sample"""

    def test_drops_disabled_keys(self):
        sample = dict(COMPLETE_COOLING_SAMPLE, chloride=120, lsi=0.3)
        restricted = restrict_sample(cooling_specs(), sample)

        assert "chloride" not in restricted
        assert "lsi" not in restricted
        assert restricted["ph"] == 7.8

    def test_drops_unsolicited_temperatures(self):
        specs = cooling_specs(alkalinity_max=None)
        restricted = restrict_sample(specs, COMPLETE_COOLING_SAMPLE)
        assert set(restricted) == {"ph", "tds", "hardness"}
