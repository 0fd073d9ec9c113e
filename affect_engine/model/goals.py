"""Goal-driven intensity modulation.

Strong personality traits imply standing goals, and an emotion that bears on
an active goal is felt more strongly. A conscientious agent cares about
finishing things, so frustration lands harder; an open one is out exploring,
so curiosity is amplified.

Goals are inferred from the profile each time, never stored, so they can't
drift from the personality they came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from affect_engine.model.mapping import canonical_label
from affect_engine.model.values import OCEANProfile, clamp_unipolar


class GoalType(str, Enum):
    """Standing goals a personality can imply."""
    EXPLORATION = "exploration"              # openness
    TASK_COMPLETION = "task_completion"      # conscientiousness
    SOCIAL_CONNECTION = "social_connection"  # extraversion
    SOCIAL_HARMONY = "social_harmony"        # agreeableness
    SAFETY = "safety"                        # neuroticism


# Trait level above which a goal is considered active
GOAL_TRAIT_THRESHOLD = 0.6

TRAIT_GOALS = {
    "openness": GoalType.EXPLORATION,
    "conscientiousness": GoalType.TASK_COMPLETION,
    "extraversion": GoalType.SOCIAL_CONNECTION,
    "agreeableness": GoalType.SOCIAL_HARMONY,
    "neuroticism": GoalType.SAFETY,
}

# goal -> canonical label -> gain at full goal strength
GOAL_LABEL_GAINS: dict[GoalType, dict[str, float]] = {
    GoalType.EXPLORATION: {
        "curious": 0.3, "awed": 0.2, "bored": 0.2, "surprised": 0.1,
    },
    GoalType.TASK_COMPLETION: {
        "frustrated": 0.3, "focused": 0.2, "proud": 0.2, "relieved": 0.15, "overwhelmed": 0.15,
    },
    GoalType.SOCIAL_CONNECTION: {
        "connected": 0.3, "lonely": 0.3, "excited": 0.1,
    },
    GoalType.SOCIAL_HARMONY: {
        "angry": 0.2, "grateful": 0.2, "trusting": 0.15, "guilty": 0.15,
    },
    GoalType.SAFETY: {
        "fearful": 0.3, "anxious": 0.3, "overwhelmed": 0.2,
    },
}

MAX_GOAL_MULTIPLIER = 1.5


@dataclass(frozen=True)
class Goal:
    """An active goal and how strongly the personality holds it (0-1)."""
    type: GoalType
    strength: float


@dataclass
class GoalModulation:
    """How active goals change the intensity of one emotion."""
    intensity_multiplier: float = 1.0
    contributing_goals: list[GoalType] = field(default_factory=list)


def infer_goals(personality: OCEANProfile) -> list[Goal]:
    """Infer active goals from traits above GOAL_TRAIT_THRESHOLD.

    Strength rises linearly from 0 at the threshold to 1 at trait = 1.0.
    A neutral profile has no goals.
    """
    goals = []
    span = 1.0 - GOAL_TRAIT_THRESHOLD
    for trait, goal_type in TRAIT_GOALS.items():
        value = personality.get(trait)
        if value > GOAL_TRAIT_THRESHOLD:
            goals.append(Goal(type=goal_type, strength=(value - GOAL_TRAIT_THRESHOLD) / span))
    return goals


def compute_goal_modulation(goals: Sequence[Goal], label: str, intensity: float) -> GoalModulation:
    """Combine the gains of every goal that cares about this label.

    The multiplier depends only on the goals and the label. intensity is
    unused here and kept so the signature matches apply_goal_modulation().
    """
    canonical = canonical_label(label)
    multiplier = 1.0
    contributing = []
    for goal in goals:
        gain = GOAL_LABEL_GAINS.get(goal.type, {}).get(canonical)
        if gain:
            multiplier += goal.strength * gain
            contributing.append(goal.type)

    return GoalModulation(
        intensity_multiplier=min(MAX_GOAL_MULTIPLIER, multiplier),
        contributing_goals=contributing,
    )


def apply_goal_modulation(goals: Sequence[Goal], label: str, intensity: float) -> float:
    """Goal-modulated intensity, clamped to [0, 1]."""
    modulation = compute_goal_modulation(goals, label, intensity)
    return clamp_unipolar(intensity * modulation.intensity_multiplier)
