"""
Clinical calculator seam for the DKA audit API.

The DKA formulas live outside this service. Any callable taking the
episode inputs and returning a ``CalculationOutcome`` (or a mapping
with an ``errors`` list alongside the results) can be plugged in,
either directly or through the ``DKA_CALCULATOR`` import string.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from dka_common.config import Settings
from dka_common.errors import ConfigurationError


@dataclass(frozen=True)
class CalculationOutcome:
    """Derived metrics plus any domain errors found while computing them."""

    results: dict[str, Any] = field(default_factory=dict)
    errors: list[Any] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @classmethod
    def coerce(cls, value: CalculationOutcome | Mapping[str, Any]) -> CalculationOutcome:
        """Accept either an outcome or a ``{..., "errors": [...]}`` mapping."""
        if isinstance(value, CalculationOutcome):
            return value
        if isinstance(value, Mapping):
            results = {k: v for k, v in value.items() if k != "errors"}
            return cls(results=results, errors=list(value.get("errors") or []))
        raise TypeError(f"calculator returned unsupported type {type(value).__name__}")


class ClinicalCalculator(Protocol):
    def __call__(self, inputs: Mapping[str, Any]) -> CalculationOutcome | Mapping[str, Any]: ...


def run_calculator(calculator: Callable[..., Any], inputs: Mapping[str, Any]) -> CalculationOutcome:
    """Call *calculator* and normalise its return value."""
    return CalculationOutcome.coerce(calculator(inputs))


def load_calculator(settings: Settings) -> ClinicalCalculator:
    """Return the calculator named by ``DKA_CALCULATOR``.

    Raises:
        ConfigurationError: If no calculator is configured.
    """
    if settings.calculator is None:
        raise ConfigurationError(
            "DKA_CALCULATOR is not set; expected an import string such as 'package.module.calculate'",
        )
    return settings.calculator
