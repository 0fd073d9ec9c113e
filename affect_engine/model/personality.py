"""OCEAN (Big Five) personality derivation.

A personality profile is fixed input; everything else the engine needs from
it is derived here as a pure function:

- Dimension baselines (the resting state every dimension decays toward)
- Dimension decay rates
- Basic emotion decay rates
- Rumination probability
- Response intensity multiplier

Each influence table maps a trait to signed weights. The effect of a trait is
proportional to its deviation from the neutral midpoint (trait - 0.5), so a
neutral profile reproduces the base tables exactly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from affect_engine.model.values import (
    DIMENSION_NAMES,
    DimensionalState,
    DimensionDecayRates,
    EmotionDecayRates,
    OCEANProfile,
    clamp_dimension,
    clamp_unipolar,
)


# ─────────────────────────────────────────────────────────────────────────────
# Influence Tables
# ─────────────────────────────────────────────────────────────────────────────

# trait -> dimension -> weight. Effect = weight * (trait - 0.5)
TRAIT_BASELINE_INFLUENCE: dict[str, dict[str, float]] = {
    "openness": {"curiosity": 0.3, "dominance": 0.1},
    "conscientiousness": {"energy": 0.2, "dominance": 0.15},
    "extraversion": {"pleasure": 0.25, "arousal": 0.2, "connection": 0.15},
    "agreeableness": {"connection": 0.25, "trust": 0.2, "pleasure": 0.1},
    "neuroticism": {"pleasure": -0.25, "arousal": 0.15, "energy": -0.1},
}

# Rate multiplier = 1 + weight * (trait - 0.5). Positive weights speed decay.
TRAIT_DIMENSION_DECAY_INFLUENCE: dict[str, dict[str, float]] = {
    "openness": {"curiosity": -0.3},                # curiosity lingers
    "conscientiousness": {"energy": 0.2},           # energy recovers faster
    "extraversion": {"arousal": 0.3, "pleasure": 0.2},
    "agreeableness": {"connection": -0.2},          # connection lingers
    "neuroticism": {"pleasure": -0.4, "arousal": -0.2},
}

TRAIT_EMOTION_DECAY_INFLUENCE: dict[str, dict[str, float]] = {
    "extraversion": {"sadness": 0.4, "happiness": -0.2},
    "neuroticism": {"sadness": -0.4, "anger": -0.3, "fear": -0.3, "disgust": -0.2},
    "agreeableness": {"anger": 0.3},
    "openness": {"surprise": -0.3, "happiness": -0.1},
}

# Lower bound on any rate multiplier. A non-positive rate would stop decay.
MIN_DECAY_MULTIPLIER = 0.1

# Rumination probability coefficients
RUMINATION_BASE = 0.5
RUMINATION_NEUROTICISM_WEIGHT = 0.6
RUMINATION_OPENNESS_WEIGHT = 0.2
RUMINATION_CONSCIENTIOUSNESS_WEIGHT = -0.3

# Response intensity coefficients and bounds
RESPONSE_NEUROTICISM_WEIGHT = 0.4
RESPONSE_AGREEABLENESS_WEIGHT = -0.2
RESPONSE_MULTIPLIER_MIN = 0.5
RESPONSE_MULTIPLIER_MAX = 2.0


@dataclass(frozen=True)
class PersonalityDerivation:
    """Everything recomputed from a profile when a trait changes.

    Produced as one unit so baseline and both rate maps can never be built
    from different profiles.
    """

    baseline: DimensionalState
    decay_rates: DimensionDecayRates
    emotion_decay_rates: EmotionDecayRates


def compute_baseline(personality: OCEANProfile) -> DimensionalState:
    """Compute personality-influenced dimension baselines.

    Starts from neutral (PAD = 0, extensions = 0.5) and applies trait
    influences, then clamps each dimension to its range.
    """
    baseline = DimensionalState.neutral().to_dict()
    for trait, influences in TRAIT_BASELINE_INFLUENCE.items():
        deviation = personality.deviation(trait)
        for dim, weight in influences.items():
            baseline[dim] += weight * deviation

    return DimensionalState(
        **{name: clamp_dimension(name, baseline[name]) for name in DIMENSION_NAMES}
    )


def _modulate_rates(rates: dict[str, float], personality: OCEANProfile, table: dict) -> dict[str, float]:
    for trait, influences in table.items():
        deviation = personality.deviation(trait)
        for name, weight in influences.items():
            rates[name] *= max(MIN_DECAY_MULTIPLIER, 1 + weight * deviation)
    return rates


def compute_dimension_decay_rates(personality: OCEANProfile) -> DimensionDecayRates:
    """Base dimension rates modulated by trait multipliers."""
    rates = _modulate_rates(
        DimensionDecayRates().to_dict(), personality, TRAIT_DIMENSION_DECAY_INFLUENCE
    )
    return DimensionDecayRates(**rates)


def compute_emotion_decay_rates(personality: OCEANProfile) -> EmotionDecayRates:
    """Base basic-emotion rates modulated by trait multipliers."""
    rates = _modulate_rates(
        EmotionDecayRates().to_dict(), personality, TRAIT_EMOTION_DECAY_INFLUENCE
    )
    return EmotionDecayRates(**rates)


def compute_rumination_probability(personality: OCEANProfile) -> float:
    """Probability that an intense emotion triggers rumination.

    High neuroticism and openness raise it; conscientiousness (better
    self-regulation) lowers it.
    """
    return clamp_unipolar(
        RUMINATION_BASE
        + RUMINATION_NEUROTICISM_WEIGHT * personality.deviation("neuroticism")
        + RUMINATION_OPENNESS_WEIGHT * personality.deviation("openness")
        + RUMINATION_CONSCIENTIOUSNESS_WEIGHT * personality.deviation("conscientiousness")
    )


def compute_response_intensity_multiplier(personality: OCEANProfile) -> float:
    """How strongly this personality responds to an incoming stimulus.

    Neuroticism amplifies responses, agreeableness dampens them slightly.
    """
    multiplier = (
        1.0
        + RESPONSE_NEUROTICISM_WEIGHT * personality.deviation("neuroticism")
        + RESPONSE_AGREEABLENESS_WEIGHT * personality.deviation("agreeableness")
    )
    return max(RESPONSE_MULTIPLIER_MIN, min(RESPONSE_MULTIPLIER_MAX, multiplier))


def derive(personality: OCEANProfile) -> PersonalityDerivation:
    """Compute baseline and both decay-rate maps for a profile."""
    return PersonalityDerivation(
        baseline=compute_baseline(personality),
        decay_rates=compute_dimension_decay_rates(personality),
        emotion_decay_rates=compute_emotion_decay_rates(personality),
    )


def half_life_hours(rate: float) -> float:
    """Half-life implied by a decay rate (inf for a zero rate)."""
    if rate <= 0:
        return math.inf
    return math.log(2) / rate
