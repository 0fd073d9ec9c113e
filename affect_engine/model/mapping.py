"""Emotion label to dimension/emotion delta mapping.

Discrete labels (usually from a classifier) become continuous changes to the
dimensional state and the basic emotions. Every delta in the table is
calibrated at intensity 1.0 and scaled by the effective intensity when
applied.

Lookup is lenient: labels are trimmed and lowercased, synonyms resolve through
LABEL_ALIASES, and a label nobody knows maps to "no effect". Labels come from
free-form classifier output, so an unexpected one must degrade gracefully
rather than fail the update. (Field names are the opposite case, see
values.UnknownFieldError.)

The built-in tables are read-only. Custom labels are merged into a new table
by affect_engine.model.taxonomy and passed in explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from affect_engine.model.values import BasicEmotions, DimensionalState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmotionDelta:
    """How one canonical label moves the state at intensity 1.0.

    Attributes:
        dimensions: Sparse map of dimension name -> delta
        emotions: Sparse map of basic emotion name -> delta
    """

    dimensions: Mapping[str, float] = field(default_factory=dict)
    emotions: Mapping[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"dimensions": dict(self.dimensions), "emotions": dict(self.emotions)}


def make_delta(dimensions: dict, emotions: Optional[dict] = None) -> EmotionDelta:
    return EmotionDelta(
        dimensions=MappingProxyType(dict(dimensions)),
        emotions=MappingProxyType(dict(emotions or {})),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Mapping Table
# ─────────────────────────────────────────────────────────────────────────────

_BUILTIN_MAPPINGS = {
    # Positive
    "happy": make_delta({"pleasure": 0.2, "arousal": 0.1, "energy": 0.05}, {"happiness": 0.3}),
    "excited": make_delta(
        {"pleasure": 0.15, "arousal": 0.25, "energy": 0.1}, {"happiness": 0.2, "surprise": 0.1}
    ),
    "calm": make_delta({"pleasure": 0.1, "arousal": -0.15, "energy": 0.05}, {"happiness": 0.05}),
    "relieved": make_delta({"pleasure": 0.15, "arousal": -0.1, "energy": 0.05}, {"happiness": 0.1}),
    "optimistic": make_delta({"pleasure": 0.15, "arousal": 0.05, "energy": 0.1}, {"happiness": 0.15}),
    "energized": make_delta({"pleasure": 0.1, "arousal": 0.15, "energy": 0.25}, {"happiness": 0.1}),
    "proud": make_delta({"pleasure": 0.15, "dominance": 0.2, "energy": 0.05}, {"happiness": 0.15}),
    "grateful": make_delta(
        {"pleasure": 0.15, "connection": 0.15, "trust": 0.1}, {"happiness": 0.15}
    ),
    "amused": make_delta(
        {"pleasure": 0.15, "arousal": 0.1, "energy": 0.05}, {"happiness": 0.2, "surprise": 0.05}
    ),
    "determined": make_delta(
        {"dominance": 0.15, "energy": 0.1, "arousal": 0.1, "curiosity": 0.05}
    ),

    # Negative
    "sad": make_delta({"pleasure": -0.2, "arousal": -0.15, "energy": -0.1}, {"sadness": 0.3}),
    "angry": make_delta(
        {"pleasure": -0.15, "arousal": 0.25, "dominance": 0.1, "trust": -0.05}, {"anger": 0.3}
    ),
    "frustrated": make_delta(
        {"pleasure": -0.1, "arousal": 0.15, "dominance": -0.05, "energy": -0.05}, {"anger": 0.2}
    ),
    "fearful": make_delta({"pleasure": -0.15, "arousal": 0.2, "dominance": -0.15}, {"fear": 0.3}),
    "anxious": make_delta(
        {"pleasure": -0.1, "arousal": 0.15, "dominance": -0.1, "energy": -0.05}, {"fear": 0.2}
    ),
    "disgusted": make_delta({"pleasure": -0.2, "arousal": 0.1}, {"disgust": 0.3}),
    "ashamed": make_delta(
        {"pleasure": -0.2, "dominance": -0.2, "connection": -0.05},
        {"sadness": 0.15, "disgust": 0.05},
    ),
    "guilty": make_delta(
        {"pleasure": -0.15, "dominance": -0.1, "energy": -0.05}, {"sadness": 0.15, "fear": 0.05}
    ),
    "jealous": make_delta(
        {"pleasure": -0.15, "arousal": 0.15, "trust": -0.1, "connection": -0.05},
        {"anger": 0.15, "fear": 0.05},
    ),
    "overwhelmed": make_delta(
        {"pleasure": -0.15, "arousal": 0.2, "dominance": -0.2, "energy": -0.15},
        {"fear": 0.15, "sadness": 0.05},
    ),

    # Cognitive
    "curious": make_delta({"curiosity": 0.2, "arousal": 0.1, "pleasure": 0.05}, {"surprise": 0.05}),
    "confused": make_delta({"curiosity": 0.1, "arousal": 0.1, "dominance": -0.1}, {"surprise": 0.1}),
    "focused": make_delta({"curiosity": 0.1, "arousal": 0.05, "energy": 0.05, "dominance": 0.05}),
    "surprised": make_delta({"arousal": 0.2, "curiosity": 0.1}, {"surprise": 0.3}),
    "awed": make_delta(
        {"pleasure": 0.1, "arousal": 0.15, "curiosity": 0.2, "dominance": -0.1},
        {"surprise": 0.2, "happiness": 0.05},
    ),
    "bored": make_delta(
        {"curiosity": -0.2, "arousal": -0.15, "energy": -0.05, "pleasure": -0.05},
        {"disgust": 0.05},
    ),

    # Social
    "connected": make_delta({"connection": 0.2, "pleasure": 0.1, "trust": 0.1}, {"happiness": 0.1}),
    "trusting": make_delta({"trust": 0.15, "connection": 0.1, "pleasure": 0.05}, {"happiness": 0.05}),
    "lonely": make_delta({"connection": -0.2, "pleasure": -0.1}, {"sadness": 0.15}),

    # Resource
    "fatigued": make_delta({"energy": -0.25, "arousal": -0.1, "pleasure": -0.05}, {"sadness": 0.05}),

    "neutral": make_delta({}),
}

EMOTION_MAPPINGS: Mapping[str, EmotionDelta] = MappingProxyType(_BUILTIN_MAPPINGS)

# Surface form -> canonical label
LABEL_ALIASES: Mapping[str, str] = MappingProxyType({
    "joy": "happy",
    "joyful": "happy",
    "happiness": "happy",
    "glad": "happy",
    "contentment": "calm",
    "content": "calm",
    "peaceful": "calm",
    "peace": "calm",
    "serene": "calm",
    "relaxed": "calm",
    "anger": "angry",
    "rage": "angry",
    "furious": "angry",
    "mad": "angry",
    "irritated": "frustrated",
    "irritation": "frustrated",
    "annoyed": "frustrated",
    "frustration": "frustrated",
    "sadness": "sad",
    "sorrow": "sad",
    "disappointment": "sad",
    "disappointed": "sad",
    "unhappy": "sad",
    "fear": "fearful",
    "scared": "fearful",
    "afraid": "fearful",
    "terrified": "fearful",
    "anxiety": "anxious",
    "worried": "anxious",
    "worry": "anxious",
    "nervous": "anxious",
    "disgust": "disgusted",
    "revulsion": "disgusted",
    "surprise": "surprised",
    "shocked": "surprised",
    "astonished": "surprised",
    "curiosity": "curious",
    "interest": "curious",
    "interested": "curious",
    "fascinated": "curious",
    "confusion": "confused",
    "bewildered": "confused",
    "puzzled": "confused",
    "connection": "connected",
    "warmth": "connected",
    "warm": "connected",
    "bonded": "connected",
    "trust": "trusting",
    "loneliness": "lonely",
    "isolated": "lonely",
    "fatigue": "fatigued",
    "tired": "fatigued",
    "exhausted": "fatigued",
    "depleted": "fatigued",
    "excitement": "excited",
    "thrilled": "excited",
    "relief": "relieved",
    "optimism": "optimistic",
    "hopeful": "optimistic",
    "hope": "optimistic",
    "energy": "energized",
    "energetic": "energized",
    "vigorous": "energized",
    "focus": "focused",
    "concentrated": "focused",
    "attentive": "focused",
    "pride": "proud",
    "gratitude": "grateful",
    "thankful": "grateful",
    "appreciative": "grateful",
    "amusement": "amused",
    "entertained": "amused",
    "awe": "awed",
    "wonder": "awed",
    "amazed": "awed",
    "boredom": "bored",
    "uninterested": "bored",
    "shame": "ashamed",
    "embarrassed": "ashamed",
    "humiliated": "ashamed",
    "guilt": "guilty",
    "regretful": "guilty",
    "remorse": "guilty",
    "jealousy": "jealous",
    "envy": "jealous",
    "envious": "jealous",
    "stressed": "overwhelmed",
    "stress": "overwhelmed",
    "swamped": "overwhelmed",
    "determination": "determined",
    "motivated": "determined",
    "resolute": "determined",
})


def normalize_label(label: str) -> str:
    return label.strip().lower()


def canonical_label(label: str, aliases: Mapping[str, str] = LABEL_ALIASES) -> str:
    """Normalize a label and resolve it through the alias table."""
    normalized = normalize_label(label)
    return aliases.get(normalized, normalized)


def get_emotion_mapping(
    label: str,
    table: Mapping[str, EmotionDelta] = EMOTION_MAPPINGS,
) -> Optional[EmotionDelta]:
    """Delta mapping for a label, or None if the label is unknown.

    An exact (normalized) key wins over alias resolution, so a custom entry
    named like a built-in alias is the one applied.
    """
    mapping = table.get(normalize_label(label))
    if mapping is not None:
        return mapping
    return table.get(canonical_label(label))


def apply_emotion_mapping(
    dimensions: DimensionalState,
    emotions: BasicEmotions,
    label: str,
    intensity: float,
    table: Mapping[str, EmotionDelta] = EMOTION_MAPPINGS,
) -> Tuple[DimensionalState, BasicEmotions]:
    """Apply a label's deltas, scaled by intensity.

    Returns new values; unknown labels return the inputs unchanged.
    """
    mapping = get_emotion_mapping(label, table)
    if mapping is None:
        logger.debug(f"No mapping for emotion label '{label}', ignoring")
        return dimensions, emotions

    return (
        dimensions.with_deltas(mapping.dimensions, intensity),
        emotions.with_deltas(mapping.emotions, intensity),
    )
