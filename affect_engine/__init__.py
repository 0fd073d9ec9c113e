"""Personality-modulated affective state engine.

A decaying multidimensional emotional state (PAD plus extensions and six
basic emotions), shaped by an OCEAN personality, driven by labelled
stimuli, echoed through rumination, and persisted with atomic writes under
an advisory lock.
"""

from affect_engine.model import (
    BasicEmotions,
    DimensionalState,
    OCEANProfile,
    UnknownFieldError,
)
from affect_engine.schemas import (
    ClassificationResult,
    EmotionBucket,
    EmotionStimulus,
    RuminationEntry,
    StateDocument,
)
from affect_engine.state import (
    EngineState,
    IdentityKind,
    LockStatus,
    StateLockedError,
    StateManager,
    build_empty_state,
)
from affect_engine.config import EngineConfig

__all__ = [
    "BasicEmotions",
    "DimensionalState",
    "OCEANProfile",
    "UnknownFieldError",
    "ClassificationResult",
    "EmotionBucket",
    "EmotionStimulus",
    "RuminationEntry",
    "StateDocument",
    "EngineState",
    "IdentityKind",
    "LockStatus",
    "StateLockedError",
    "StateManager",
    "build_empty_state",
    "EngineConfig",
]
