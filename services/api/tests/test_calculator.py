"""Tests for api.audit.calculator."""

from __future__ import annotations

import pytest

from api.audit.calculator import CalculationOutcome, load_calculator, run_calculator
from dka_common.config import Settings
from dka_common.errors import ConfigurationError


class TestCalculationOutcome:
    def test_coerce_mapping_splits_errors(self):
        outcome = CalculationOutcome.coerce({"severity": "mild", "errors": []})
        assert outcome.results == {"severity": "mild"}
        assert outcome.ok

    def test_coerce_mapping_with_errors(self):
        outcome = CalculationOutcome.coerce({"errors": ["pH and bicarbonate disagree"]})
        assert not outcome.ok
        assert outcome.errors == ["pH and bicarbonate disagree"]

    def test_coerce_mapping_without_errors_key(self):
        assert CalculationOutcome.coerce({"severity": "severe"}).ok

    def test_coerce_passthrough(self):
        outcome = CalculationOutcome(results={"a": 1})
        assert CalculationOutcome.coerce(outcome) is outcome

    def test_coerce_rejects_other_types(self):
        with pytest.raises(TypeError):
            CalculationOutcome.coerce(["not", "a", "mapping"])  # type: ignore[arg-type]


class TestRunCalculator:
    def test_passes_inputs(self, calculator):
        run_calculator(calculator, {"pH": 7.1})
        assert calculator.calls == [{"pH": 7.1}]


class TestLoadCalculator:
    def test_missing_calculator_is_configuration_error(self, settings: Settings):
        with pytest.raises(ConfigurationError, match="DKA_CALCULATOR"):
            load_calculator(settings)

    def test_import_string_resolved(self):
        settings = Settings(pepper="p", calculator="json.dumps")  # type: ignore[arg-type]
        import json

        assert load_calculator(settings) is json.dumps
