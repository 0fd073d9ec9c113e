"""Time-based exponential decay engine.

Each value relaxes toward a resting point at its own rate:

    new = baseline + (current - baseline) * exp(-rate * elapsed_hours)

Dimensions rest at the personality baseline, basic emotions rest at 0.
Half-life = ln(2) / rate, so the default 0.058/h is roughly 12 hours.

The curve never crosses the baseline and is monotonic in elapsed time, so
repeated small decays and one large decay land in the same place.
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional, Tuple

import numpy as np

from affect_engine.model.values import (
    BASIC_EMOTION_NAMES,
    DIMENSION_NAMES,
    BasicEmotions,
    DimensionalState,
    DimensionDecayRates,
    EmotionDecayRates,
)

SECONDS_PER_HOUR = 3600.0

# Rate giving a one-hour half-life
ONE_HOUR_RATE = math.log(2)


class DecayPreset(str, Enum):
    """How decay rates are chosen at decay time."""
    FAST = "fast"       # ~1h half-life everywhere, ignores personality
    SLOW = "slow"       # Personality-derived rates (human-like)
    CUSTOM = "custom"   # Personality-derived rates with explicit overrides


def decay_toward_baseline(
    current: float,
    baseline: float,
    rate: float,
    elapsed_hours: float,
) -> float:
    """Decay a single value toward a baseline.

    Args:
        current: Current value
        baseline: Resting value
        rate: Decay rate per hour
        elapsed_hours: Time since the last decay. Non-positive values (clock
            skew, backdated timestamps) leave the value unchanged.

    Returns:
        Decayed value
    """
    if elapsed_hours <= 0:
        return current
    return baseline + (current - baseline) * math.exp(-rate * elapsed_hours)


def _decay_vector(current: list[float], baseline: list[float], rates: list[float], hours: float) -> np.ndarray:
    cur = np.asarray(current, dtype=float)
    base = np.asarray(baseline, dtype=float)
    return base + (cur - base) * np.exp(-np.asarray(rates, dtype=float) * hours)


def decay_dimensions(
    state: DimensionalState,
    baseline: DimensionalState,
    rates: DimensionDecayRates,
    elapsed_hours: float,
) -> DimensionalState:
    """Decay all dimensions toward their baselines. Returns a new state."""
    if elapsed_hours <= 0:
        return state
    decayed = _decay_vector(state.to_vector(), baseline.to_vector(), rates.to_vector(), elapsed_hours)
    return DimensionalState(**dict(zip(DIMENSION_NAMES, decayed.tolist())))


def decay_basic_emotions(
    emotions: BasicEmotions,
    rates: EmotionDecayRates,
    elapsed_hours: float,
) -> BasicEmotions:
    """Decay all basic emotions toward zero. Returns a new value."""
    if elapsed_hours <= 0:
        return emotions
    zeros = [0.0] * len(BASIC_EMOTION_NAMES)
    decayed = _decay_vector(emotions.to_vector(), zeros, rates.to_vector(), elapsed_hours)
    return BasicEmotions(**dict(zip(BASIC_EMOTION_NAMES, decayed.tolist())))


def elapsed_hours(since: datetime, now: datetime) -> float:
    """Hours between two instants, floored at 0."""
    return max(0.0, (now - since).total_seconds() / SECONDS_PER_HOUR)


def rate_for_half_life(hours: float) -> float:
    """Decay rate whose half-life is the given number of hours."""
    if hours <= 0:
        raise ValueError(f"Half-life must be positive, got {hours}")
    return math.log(2) / hours


def effective_decay_rates(
    dimension_rates: DimensionDecayRates,
    emotion_rates: EmotionDecayRates,
    preset: DecayPreset = DecayPreset.SLOW,
    overrides: Optional[Mapping[str, float]] = None,
) -> Tuple[DimensionDecayRates, EmotionDecayRates]:
    """Pick the rates actually used for a decay step.

    The personality-derived rates stored on the state are never modified;
    presets and overrides only shape what this returns.

    Args:
        dimension_rates: Personality-derived dimension rates
        emotion_rates: Personality-derived emotion rates
        preset: FAST replaces everything with one-hour half-lives
        overrides: Per-dimension rates layered over SLOW/CUSTOM

    Returns:
        (dimension_rates, emotion_rates) to decay with
    """
    if DecayPreset(preset) is DecayPreset.FAST:
        return (
            DimensionDecayRates(**{name: ONE_HOUR_RATE for name in DIMENSION_NAMES}),
            EmotionDecayRates(**{name: ONE_HOUR_RATE for name in BASIC_EMOTION_NAMES}),
        )

    for name, rate in (overrides or {}).items():
        dimension_rates = dimension_rates.with_value(name, rate)
    return dimension_rates, emotion_rates
