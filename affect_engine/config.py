"""Engine configuration.

EngineConfig is the resolved configuration the engine consumes. Loading it
from files or environment variables is the host's job; from_dict() accepts
whatever plain mapping the host produced.

Attributes are validated in __post_init__ so a bad value fails at startup
rather than in the middle of an update.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional

from affect_engine.model.decay import DecayPreset
from affect_engine.model.mapping import EmotionDelta
from affect_engine.model.taxonomy import merge_custom_mappings, validate_taxonomy
from affect_engine.model.values import DimensionDecayRates
from affect_engine.state.store import DEFAULT_LOCK_STALE_MS

logger = logging.getLogger(__name__)

DEFAULT_EMOTION_LABELS = (
    "neutral",
    "calm",
    "happy",
    "excited",
    "sad",
    "anxious",
    "frustrated",
    "angry",
    "confused",
    "focused",
    "relieved",
    "optimistic",
    "curious",
    "surprised",
    "disgusted",
    "fearful",
    "trusting",
    "connected",
    "lonely",
    "energized",
    "fatigued",
)


@dataclass
class EngineConfig:
    """Configuration for the affective engine.

    Attributes:
        half_life_hours: Half-life used to weight stimuli in the label trend view
        trend_window_hours: How far back the label trend view looks
        max_history: Cap for stimulus history and per-identity histories
        confidence_min: Classifier results below this confidence become neutral
        rumination_enabled: Whether intense stimuli start rumination
        rumination_threshold: Base intensity threshold for rumination
        rumination_max_stages: Stage at which a rumination entry expires
        decay_preset: "fast", "slow" or "custom"
        decay_rate_overrides: Dimension name -> decay rate, layered over
            personality-derived rates
        emotion_labels: Label taxonomy the classifier may return
        custom_mappings: Label -> {"dimensions": {...}, "emotions": {...}}
        goal_modulation_enabled: Scale stimuli by personality-inferred goals
        lock_stale_ms: Age after which a lock file is considered abandoned
    """

    half_life_hours: float = 12.0
    trend_window_hours: float = 24.0
    max_history: int = 100
    confidence_min: float = 0.35

    # Rumination
    rumination_enabled: bool = True
    rumination_threshold: float = 0.7
    rumination_max_stages: int = 4

    # Decay
    decay_preset: DecayPreset = DecayPreset.SLOW
    decay_rate_overrides: dict[str, float] = field(default_factory=dict)

    # Taxonomy
    emotion_labels: tuple[str, ...] = DEFAULT_EMOTION_LABELS
    custom_mappings: dict[str, Any] = field(default_factory=dict)

    goal_modulation_enabled: bool = False

    lock_stale_ms: int = DEFAULT_LOCK_STALE_MS

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.half_life_hours <= 0:
            raise ValueError(f"half_life_hours must be positive, got {self.half_life_hours}")
        if self.trend_window_hours <= 0:
            raise ValueError(f"trend_window_hours must be positive, got {self.trend_window_hours}")
        if self.max_history < 1:
            raise ValueError(f"max_history must be at least 1, got {self.max_history}")
        if not 0.0 <= self.confidence_min <= 1.0:
            raise ValueError(f"confidence_min must be in [0, 1], got {self.confidence_min}")
        if not 0.0 <= self.rumination_threshold <= 1.0:
            raise ValueError(
                f"rumination_threshold must be in [0, 1], got {self.rumination_threshold}"
            )
        if self.rumination_max_stages < 1:
            raise ValueError(
                f"rumination_max_stages must be at least 1, got {self.rumination_max_stages}"
            )
        if self.lock_stale_ms <= 0:
            raise ValueError(f"lock_stale_ms must be positive, got {self.lock_stale_ms}")

        self.decay_preset = DecayPreset(self.decay_preset)
        for name, rate in self.decay_rate_overrides.items():
            DimensionDecayRates.check_name(name)
            if rate < 0:
                raise ValueError(f"Decay rate override for '{name}' must be >= 0, got {rate}")

        self.emotion_labels = tuple(self.emotion_labels)
        validation = validate_taxonomy(self.emotion_labels, self.mapping_table())
        if not validation.valid:
            raise ValueError("; ".join(validation.warnings))
        for warning in validation.warnings:
            logger.warning(f"Emotion taxonomy: {warning}")

    def mapping_table(self) -> dict[str, EmotionDelta]:
        """Built-in label table with custom mappings merged over it."""
        return merge_custom_mappings(self.custom_mappings)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "EngineConfig":
        """Build a config from a plain mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            if key in known:
                kwargs[key] = value
            else:
                logger.debug(f"Ignoring unknown config key '{key}'")
        return cls(**kwargs)
