"""Pydantic schemas for engine records and the persisted state document.

This module defines:
- EmotionStimulus: An immutable classified emotional event
- RuminationEntry: One active rumination echo
- EmotionBucket: Latest + capped history of emotions for a user or agent
- ClassificationResult: What the external classifier hands us
- StateDocument: The on-disk layout of a full engine state

Numeric fields that represent intensities or confidences are clamped to
[0, 1] on validation instead of being rejected; a classifier returning 1.2
should produce a saturated stimulus, not an exception.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from affect_engine.model.values import clamp_unipolar

# Persisted document layout version
SCHEMA_VERSION = 2


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(timezone.utc)


def new_stimulus_id() -> str:
    return str(uuid.uuid4())


def assume_utc(value: datetime) -> datetime:
    """Read a naive timestamp as UTC. Aware timestamps pass through."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class EmotionStimulus(BaseModel):
    """A classified emotional event. Never mutated after creation."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_stimulus_id)
    timestamp: datetime = Field(default_factory=utc_now)
    label: str
    intensity: float = 0.0
    trigger: str = ""
    confidence: float = 1.0
    source_role: str = "system"     # "user" | "assistant" | "system"
    source_hash: Optional[str] = None

    @field_validator("intensity", "confidence")
    @classmethod
    def _clamp_unit(cls, value: float) -> float:
        return clamp_unipolar(value)

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return assume_utc(value)


class RuminationEntry(BaseModel):
    """An intense stimulus still echoing through the state."""
    model_config = ConfigDict(frozen=True)

    stimulus_id: str
    label: str
    stage: int = Field(default=0, ge=0)
    intensity: float
    last_stage_timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("intensity")
    @classmethod
    def _clamp_unit(cls, value: float) -> float:
        return clamp_unipolar(value)

    @field_validator("last_stage_timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return assume_utc(value)


class EmotionBucket(BaseModel):
    """Tracked emotions for one user or agent (history newest first)."""
    model_config = ConfigDict(frozen=True)

    latest: Optional[EmotionStimulus] = None
    history: tuple[EmotionStimulus, ...] = ()


class ClassificationResult(BaseModel):
    """Output of the external emotion classifier."""
    model_config = ConfigDict(frozen=True)

    label: str
    intensity: float
    reason: str = ""
    confidence: float = 1.0

    @field_validator("intensity", "confidence")
    @classmethod
    def _clamp_unit(cls, value: float) -> float:
        return clamp_unipolar(value)

    @classmethod
    def neutral(cls) -> "ClassificationResult":
        return cls(label="neutral", intensity=0.0, reason="classification unavailable", confidence=0.0)

    def coerce(self, labels: Iterable[str], confidence_min: float) -> "ClassificationResult":
        """Normalize the label, falling back to neutral when untrusted.

        Labels outside the configured taxonomy and results below
        confidence_min both become the neutral result.
        """
        label = self.label.strip().lower()
        known = {candidate.strip().lower() for candidate in labels}
        if label not in known or self.confidence < confidence_min:
            return self.neutral()
        return self.model_copy(update={"label": label, "reason": self.reason.strip() or "unsure"})


class RuminationDocument(BaseModel):
    active: list[RuminationEntry] = Field(default_factory=list)


class MetaDocument(BaseModel):
    total_updates: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return assume_utc(value)


class StateDocument(BaseModel):
    """On-disk layout of an engine state.

    Vectors are stored as plain name -> value maps so that a document with a
    missing or extra field still loads; EngineState.from_document() fills in
    defaults and clamps.
    """
    version: int = SCHEMA_VERSION
    last_updated: datetime = Field(default_factory=utc_now)
    personality: dict[str, float] = Field(default_factory=dict)
    dimensions: dict[str, float] = Field(default_factory=dict)
    baseline: dict[str, float] = Field(default_factory=dict)
    decay_rates: dict[str, float] = Field(default_factory=dict)
    emotion_decay_rates: dict[str, float] = Field(default_factory=dict)
    basic_emotions: dict[str, float] = Field(default_factory=dict)
    recent_stimuli: list[EmotionStimulus] = Field(default_factory=list)
    rumination: RuminationDocument = Field(default_factory=RuminationDocument)
    users: dict[str, EmotionBucket] = Field(default_factory=dict)
    agents: dict[str, EmotionBucket] = Field(default_factory=dict)
    meta: MetaDocument = Field(default_factory=MetaDocument)

    @field_validator("last_updated")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Hand-edited documents may carry naive timestamps
        return assume_utc(value)

    @field_validator("version")
    @classmethod
    def _supported_version(cls, value: int) -> int:
        if value != SCHEMA_VERSION:
            raise ValueError(
                f"Unsupported state document version {value} (expected {SCHEMA_VERSION}); "
                "migrate it before loading"
            )
        return value
