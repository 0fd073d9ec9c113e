"""Bounded value model for the affective state.

Three families of named scalar vectors make up the engine's state:

- DimensionalState: PAD core (pleasure, arousal, dominance) in [-1, 1]
  plus four unipolar extensions (connection, curiosity, energy, trust) in [0, 1]
- BasicEmotions: Ekman's six basic emotions, each in [0, 1]
- OCEANProfile: Big Five personality traits, each in [0, 1]

All vectors are frozen dataclasses. Every construction clamps, so any value
reachable through the public API lies inside its declared range. Out-of-range
input is saturated rather than rejected: upstream deltas may be malformed and
must never crash the engine.

Field *names* are different. Asking for a dimension, emotion or trait that
does not exist raises UnknownFieldError, because those names come from
trusted callers and a typo there is a bug. Free-form emotion labels, which
come from classifier output, are handled leniently by the label mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import ClassVar, Iterable, Mapping, Optional


# PAD dimensions range from -1 to +1
BIPOLAR_DIMENSIONS = ("pleasure", "arousal", "dominance")

# AI-relevant extensions range from 0 to 1
UNIPOLAR_DIMENSIONS = ("connection", "curiosity", "energy", "trust")

DIMENSION_NAMES = BIPOLAR_DIMENSIONS + UNIPOLAR_DIMENSIONS

BASIC_EMOTION_NAMES = (
    "happiness", "sadness", "anger", "fear", "disgust", "surprise"
)

OCEAN_TRAITS = (
    "openness", "conscientiousness", "extraversion", "agreeableness", "neuroticism"
)

# Neutral resting point for unipolar dimensions and personality traits
NEUTRAL_MIDPOINT = 0.5

# Below this every basic emotion counts as absent ("neutral")
PRIMARY_EMOTION_EPSILON = 0.01


class UnknownFieldError(ValueError):
    """Raised when a dimension, emotion, trait or rate is addressed by a bad name.

    Carries the offending name and the valid set so callers can report
    something useful instead of a bare KeyError.
    """

    def __init__(self, kind: str, name: str, valid: Iterable[str]):
        self.kind = kind
        self.name = name
        self.valid = tuple(valid)
        super().__init__(
            f"Unknown {kind} '{name}'. Valid {kind} names: {', '.join(self.valid)}"
        )


def clamp_bipolar(value: float) -> float:
    """Clamp to [-1, 1]."""
    return max(-1.0, min(1.0, value))


def clamp_unipolar(value: float) -> float:
    """Clamp to [0, 1]."""
    return max(0.0, min(1.0, value))


def clamp_dimension(name: str, value: float) -> float:
    """Clamp a dimension value to the range declared for that dimension."""
    if name in BIPOLAR_DIMENSIONS:
        return clamp_bipolar(value)
    if name in UNIPOLAR_DIMENSIONS:
        return clamp_unipolar(value)
    raise UnknownFieldError("dimension", name, DIMENSION_NAMES)


@dataclass(frozen=True)
class NamedVector:
    """Base for the fixed-shape scalar vectors.

    Subclasses declare their fields as ordinary dataclass fields, list them
    in FIELD_NAMES, and override _clamp() to enforce their range.
    """

    FIELD_NAMES: ClassVar[tuple[str, ...]] = ()
    KIND: ClassVar[str] = "field"

    def __post_init__(self) -> None:
        """Clamp all values to valid range."""
        for name in self.FIELD_NAMES:
            object.__setattr__(self, name, self._clamp(name, float(getattr(self, name))))

    @classmethod
    def _clamp(cls, name: str, value: float) -> float:
        return value

    @classmethod
    def check_name(cls, name: str) -> str:
        """Return name unchanged if it is a field of this vector, else raise."""
        if name not in cls.FIELD_NAMES:
            raise UnknownFieldError(cls.KIND, name, cls.FIELD_NAMES)
        return name

    def get(self, name: str) -> float:
        return getattr(self, self.check_name(name))

    def with_value(self, name: str, value: float) -> "NamedVector":
        """Return a copy with one field replaced (clamped)."""
        return replace(self, **{self.check_name(name): value})

    def with_deltas(self, deltas: Mapping[str, float], scale: float = 1.0) -> "NamedVector":
        """Return a copy with scaled deltas added to the named fields.

        Every name in deltas must belong to this vector.
        """
        if not deltas:
            return self
        updates = {
            self.check_name(name): getattr(self, name) + delta * scale
            for name, delta in deltas.items()
        }
        return replace(self, **updates)

    def to_vector(self) -> list[float]:
        """Values in FIELD_NAMES order."""
        return [getattr(self, name) for name in self.FIELD_NAMES]

    @classmethod
    def from_vector(cls, vec: Iterable[float]) -> "NamedVector":
        return cls(**dict(zip(cls.FIELD_NAMES, vec)))

    def to_dict(self) -> dict[str, float]:
        """Serialize for storage."""
        return {name: getattr(self, name) for name in self.FIELD_NAMES}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, object]]) -> "NamedVector":
        """Deserialize from storage.

        Missing or non-numeric entries fall back to the field default and
        unknown keys are ignored, so partially written documents still load.
        """
        data = data or {}
        kwargs = {}
        for f in fields(cls):
            value = data.get(f.name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                kwargs[f.name] = float(value)
        return cls(**kwargs)


@dataclass(frozen=True)
class DimensionalState(NamedVector):
    """PAD core dimensions plus AI-relevant extensions.

    Attributes:
        pleasure: Valence, unpleasant (-1) to pleasant (+1)
        arousal: Activation, calm (-1) to excited (+1)
        dominance: Control, submissive (-1) to dominant (+1)
        connection: Social bonding (0 = distant, 1 = close)
        curiosity: Intellectual engagement (0 = bored, 1 = fascinated)
        energy: Resource level (0 = depleted, 1 = energized)
        trust: Interpersonal trust (0 = guarded, 1 = trusting)
    """

    FIELD_NAMES: ClassVar[tuple[str, ...]] = DIMENSION_NAMES
    KIND: ClassVar[str] = "dimension"

    pleasure: float = 0.0
    arousal: float = 0.0
    dominance: float = 0.0
    connection: float = NEUTRAL_MIDPOINT
    curiosity: float = NEUTRAL_MIDPOINT
    energy: float = NEUTRAL_MIDPOINT
    trust: float = NEUTRAL_MIDPOINT

    @classmethod
    def _clamp(cls, name: str, value: float) -> float:
        return clamp_dimension(name, value)

    @classmethod
    def neutral(cls) -> "DimensionalState":
        return cls()


@dataclass(frozen=True)
class BasicEmotions(NamedVector):
    """Ekman's six basic emotions. Each rests at 0 and decays toward it."""

    FIELD_NAMES: ClassVar[tuple[str, ...]] = BASIC_EMOTION_NAMES
    KIND: ClassVar[str] = "emotion"

    happiness: float = 0.0
    sadness: float = 0.0
    anger: float = 0.0
    fear: float = 0.0
    disgust: float = 0.0
    surprise: float = 0.0

    @classmethod
    def _clamp(cls, name: str, value: float) -> float:
        return clamp_unipolar(value)

    def primary(self) -> str:
        """Name of the strongest emotion, or "neutral" when all are negligible."""
        values = self.to_dict()
        name = max(BASIC_EMOTION_NAMES, key=lambda n: values[n])
        if values[name] < PRIMARY_EMOTION_EPSILON:
            return "neutral"
        return name

    def overall_intensity(self) -> float:
        """Peak activation across the basic emotions (0-1)."""
        return max(self.to_vector())


@dataclass(frozen=True)
class OCEANProfile(NamedVector):
    """Big Five personality traits. 0.5 is the population midpoint."""

    FIELD_NAMES: ClassVar[tuple[str, ...]] = OCEAN_TRAITS
    KIND: ClassVar[str] = "trait"

    openness: float = NEUTRAL_MIDPOINT
    conscientiousness: float = NEUTRAL_MIDPOINT
    extraversion: float = NEUTRAL_MIDPOINT
    agreeableness: float = NEUTRAL_MIDPOINT
    neuroticism: float = NEUTRAL_MIDPOINT

    @classmethod
    def _clamp(cls, name: str, value: float) -> float:
        return clamp_unipolar(value)

    def deviation(self, trait: str) -> float:
        """Signed distance of a trait from the neutral midpoint."""
        return self.get(trait) - NEUTRAL_MIDPOINT


@dataclass(frozen=True)
class DimensionDecayRates(NamedVector):
    """Per-dimension decay rates (per hour; half-life = ln 2 / rate)."""

    FIELD_NAMES: ClassVar[tuple[str, ...]] = DIMENSION_NAMES
    KIND: ClassVar[str] = "decay rate"

    pleasure: float = 0.058     # ~12h half-life
    arousal: float = 0.087      # ~8h half-life
    dominance: float = 0.046    # ~15h half-life
    connection: float = 0.035   # ~20h half-life
    curiosity: float = 0.058    # ~12h half-life
    energy: float = 0.046       # ~15h half-life
    trust: float = 0.035        # ~20h half-life

    @classmethod
    def _clamp(cls, name: str, value: float) -> float:
        return max(0.0, value)


@dataclass(frozen=True)
class EmotionDecayRates(NamedVector):
    """Per-basic-emotion decay rates (per hour)."""

    FIELD_NAMES: ClassVar[tuple[str, ...]] = BASIC_EMOTION_NAMES
    KIND: ClassVar[str] = "emotion decay rate"

    happiness: float = 0.058    # ~12h half-life
    sadness: float = 0.046      # ~15h half-life (lingers)
    anger: float = 0.058        # ~12h half-life
    fear: float = 0.058         # ~12h half-life
    disgust: float = 0.046      # ~15h half-life
    surprise: float = 0.139     # ~5h half-life (fades fast)

    @classmethod
    def _clamp(cls, name: str, value: float) -> float:
        return max(0.0, value)


def primary_emotion(emotions: BasicEmotions) -> str:
    """Dominant basic emotion, or "neutral"."""
    return emotions.primary()


def overall_intensity(emotions: BasicEmotions) -> float:
    """Overall emotional activation (max of basic emotions)."""
    return emotions.overall_intensity()
