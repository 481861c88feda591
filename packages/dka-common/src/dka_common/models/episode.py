"""
Episode submission models for the DKA audit API.

Defines the Pydantic models for a clinical-episode submission sent to
``POST /calculate`` and the amendment sent to ``POST /update``. Field
names are snake_case in Python and camelCase on the wire. Only shape
and type are checked here; clinical consistency is the calculator's job.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Lab values that may be omitted. Omission is recorded as ``None``; a
# submitted zero is kept as zero.
OPTIONAL_LAB_FIELDS: tuple[str, ...] = ("bicarbonate", "glucose", "ketones")

# Identifying inputs that are never persisted in raw form.
IDENTIFYING_FIELDS: frozenset[str] = frozenset({"patient_hash", "patient_postcode"})


class EpisodeType(str, enum.Enum):
    """Whether the episode is a real patient or a training/test run."""

    REAL = "real"
    TEST = "test"


class PatientSex(str, enum.Enum):
    """Patient sex used by the weight-based calculations."""

    MALE = "male"
    FEMALE = "female"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class EpisodeSubmission(_CamelModel):
    """A clinical episode submitted for calculation and audit.

    Attributes:
        legal_agreement: Clinician accepted the terms of use.
        episode_type: ``real`` or ``test``.
        region: Clinical network region.
        centre: Treating centre.
        protocol_start_datetime: When the DKA protocol was started.
        patient_age: Age in years.
        patient_sex: ``male`` or ``female``.
        patient_weight: Weight in kilograms.
        weight_limit_override: Clinician overrode the weight cap.
        ph: Venous or capillary pH.
        bicarbonate: Bicarbonate in mmol/L, optional.
        glucose: Glucose in mmol/L, optional.
        ketones: Ketones in mmol/L, optional.
        shock_present: Clinical shock at presentation.
        insulin_rate: Insulin infusion rate in units/kg/hour.
        pre_existing_diabetes: Known diabetes before this episode.
        insulin_delivery_method: Pre-existing delivery method, if any.
        ethnic_group: Self-reported ethnic group.
        ethnic_subgroup: Self-reported ethnic subgroup.
        preventable_factors: Factors judged to have contributed.
        patient_postcode: Postcode used for the deprivation lookup only.
        patient_hash: First-stage hash of the patient identifier.
        app_version: Client application version.
        client_datetime: Clock time on the submitting device.
        client_useragent: Browser user agent of the submitting device.
    """

    legal_agreement: bool = Field(..., description="Terms of use accepted.")
    episode_type: EpisodeType = Field(..., description="Real patient or test run.")
    region: str = Field(..., max_length=100)
    centre: str = Field(..., max_length=255)
    protocol_start_datetime: datetime = Field(..., description="Protocol start time.")

    patient_age: int = Field(..., ge=0, description="Age in years.")
    patient_sex: PatientSex
    patient_weight: float = Field(..., gt=0.0, description="Weight in kg.")
    weight_limit_override: bool = False

    ph: float = Field(..., alias="pH", description="Venous or capillary pH.")
    bicarbonate: float | None = Field(default=None, ge=0.0)
    glucose: float | None = Field(default=None, ge=0.0)
    ketones: float | None = Field(default=None, ge=0.0)

    shock_present: bool
    insulin_rate: float = Field(..., gt=0.0)
    pre_existing_diabetes: bool
    insulin_delivery_method: str | None = Field(default=None, max_length=50)

    ethnic_group: str | None = Field(default=None, max_length=100)
    ethnic_subgroup: str | None = Field(default=None, max_length=100)
    preventable_factors: list[str] | None = None

    patient_postcode: str | None = Field(default=None, max_length=10)
    patient_hash: str | None = Field(default=None, max_length=128)

    app_version: str | None = Field(default=None, max_length=50)
    client_datetime: datetime | None = None
    client_useragent: str | None = Field(default=None, max_length=500)

    def lab_value(self, name: str) -> float | None:
        """Return an optional lab value, ``None`` when it was not provided.

        Presence is taken from the set of fields the client actually sent,
        so an explicit ``0`` is returned as ``0.0``.
        """
        if name not in self.model_fields_set:
            return None
        return getattr(self, name)

    def calculation_inputs(self) -> dict[str, Any]:
        """Return the wire-form inputs with identifying fields removed.

        Optional lab values the client omitted are present as ``None``.
        """
        inputs = self.model_dump(mode="json", by_alias=True, exclude=set(IDENTIFYING_FIELDS))
        for name in OPTIONAL_LAB_FIELDS:
            inputs[to_camel(name)] = self.lab_value(name)
        return inputs


class AuditAmendment(_CamelModel):
    """Outcome fields an update may replace on an existing audit record."""

    preventable_factors: list[str] = Field(
        default_factory=list,
        description="Factors judged to have contributed to the episode.",
    )
