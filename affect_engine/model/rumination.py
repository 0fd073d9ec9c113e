"""Rumination: bounded multi-stage echo of intense stimuli.

A stimulus strong enough to clear the personality-adjusted threshold keeps
replaying its effect for a few ticks, fading each time:

    absent --start--> active(stage 0) --advance--> active(stage n) --> expired

On every advance an entry first re-applies its label mapping at its current
intensity, then fades by RUMINATION_DECAY_FACTOR and moves up one stage.
It expires (is dropped) once it reaches max_stages or falls below
MIN_RUMINATION_INTENSITY.

Entry lists are tuples and every function returns a new one.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional, Sequence, Tuple

from affect_engine.model.mapping import EMOTION_MAPPINGS, EmotionDelta, apply_emotion_mapping
from affect_engine.model.values import BasicEmotions, DimensionalState
from affect_engine.schemas import EmotionStimulus, RuminationEntry, utc_now

logger = logging.getLogger(__name__)

# Intensity multiplier per stage advance
RUMINATION_DECAY_FACTOR = 0.8

# Entries fading below this are dropped
MIN_RUMINATION_INTENSITY = 0.05

# How much rumination probability raises the start threshold
ADJUSTED_THRESHOLD_WEIGHT = 0.3

DEFAULT_MAX_STAGES = 4


class RuminationPhase(str, Enum):
    ABSENT = "absent"
    ACTIVE = "active"
    EXPIRED = "expired"


def adjusted_threshold(threshold: float, probability: float) -> float:
    return threshold + probability * ADJUSTED_THRESHOLD_WEIGHT


def should_start_rumination(intensity: float, threshold: float, probability: float) -> bool:
    """True when intensity strictly exceeds the personality-adjusted threshold.

    Args:
        intensity: Effective intensity of the stimulus just applied
        threshold: Configured rumination threshold
        probability: Personality rumination probability (0-1)
    """
    return intensity > adjusted_threshold(threshold, probability)


def start_rumination(
    entries: Sequence[RuminationEntry],
    stimulus: EmotionStimulus,
    now: Optional[datetime] = None,
) -> Tuple[RuminationEntry, ...]:
    """Append a stage-0 entry for the stimulus.

    Starting twice for the same stimulus id is a no-op.
    """
    entries = tuple(entries)
    if any(entry.stimulus_id == stimulus.id for entry in entries):
        return entries

    entry = RuminationEntry(
        stimulus_id=stimulus.id,
        label=stimulus.label,
        stage=0,
        intensity=stimulus.intensity,
        last_stage_timestamp=now or utc_now(),
    )
    logger.debug(f"Rumination started for '{stimulus.label}' at intensity {stimulus.intensity:.2f}")
    return entries + (entry,)


def apply_rumination_effects(
    entries: Sequence[RuminationEntry],
    dimensions: DimensionalState,
    emotions: BasicEmotions,
    table: Mapping[str, EmotionDelta] = EMOTION_MAPPINGS,
) -> Tuple[DimensionalState, BasicEmotions]:
    """Re-apply every active entry's mapping at its current intensity."""
    for entry in entries:
        dimensions, emotions = apply_emotion_mapping(
            dimensions, emotions, entry.label, entry.intensity, table
        )
    return dimensions, emotions


def rumination_phase(entry: Optional[RuminationEntry], max_stages: int = DEFAULT_MAX_STAGES) -> RuminationPhase:
    """Classify an entry. None means no rumination was ever started."""
    if entry is None:
        return RuminationPhase.ABSENT
    if entry.stage >= max_stages or entry.intensity < MIN_RUMINATION_INTENSITY:
        return RuminationPhase.EXPIRED
    return RuminationPhase.ACTIVE


def advance_rumination(
    entries: Sequence[RuminationEntry],
    max_stages: int = DEFAULT_MAX_STAGES,
    decay_factor: float = RUMINATION_DECAY_FACTOR,
    now: Optional[datetime] = None,
) -> Tuple[RuminationEntry, ...]:
    """Fade every entry one stage and drop the expired ones.

    Effects are not applied here; callers run apply_rumination_effects()
    on the pre-advance entries first.
    """
    if not entries:
        return ()

    now = now or utc_now()
    advanced = []
    for entry in entries:
        next_entry = entry.model_copy(update={
            "stage": entry.stage + 1,
            "intensity": entry.intensity * decay_factor,
            "last_stage_timestamp": now,
        })
        if rumination_phase(next_entry, max_stages) is RuminationPhase.EXPIRED:
            logger.debug(
                f"Rumination for '{entry.label}' expired at stage {next_entry.stage} "
                f"(intensity {next_entry.intensity:.3f})"
            )
            continue
        advanced.append(next_entry)
    return tuple(advanced)
