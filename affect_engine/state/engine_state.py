"""EngineState: the aggregate root of the affective engine.

One EngineState holds everything the engine knows about one agent: current
dimensions and emotions, the personality with its derived fields, recent
stimuli, active rumination, per-identity emotion buckets and an update
counter.

EngineState is frozen. Operations in affect_engine.state.manager build new
values with dataclasses.replace(); no operation changes a state it was given.
Collections are tuples and read-only mappings for the same reason.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional

from affect_engine.model.personality import derive
from affect_engine.model.values import (
    BasicEmotions,
    DimensionalState,
    DimensionDecayRates,
    EmotionDecayRates,
    OCEANProfile,
)
from affect_engine.schemas import (
    SCHEMA_VERSION,
    EmotionBucket,
    EmotionStimulus,
    MetaDocument,
    RuminationDocument,
    RuminationEntry,
    StateDocument,
    utc_now,
)


def _frozen_buckets(buckets: Optional[Mapping[str, EmotionBucket]]) -> Mapping[str, EmotionBucket]:
    return MappingProxyType(dict(buckets or {}))


@dataclass(frozen=True)
class EngineState:
    """Complete affective state for one agent.

    Attributes:
        version: Document layout version this state serializes to
        last_updated: Instant of the last decay or save
        created_at: When this state was first built
        personality: OCEAN profile
        dimensions: Current dimensional state
        baseline: Resting dimensions, derived from personality
        decay_rates: Dimension decay rates, derived from personality
        emotion_decay_rates: Basic emotion decay rates, derived from personality
        basic_emotions: Current basic emotions
        recent_stimuli: Applied stimuli, newest first, capped
        rumination: Active rumination entries
        users: Identity key -> tracked user emotions
        agents: Identity key -> tracked agent emotions
        total_updates: Count of state-changing operations
    """

    version: int = SCHEMA_VERSION
    last_updated: datetime = field(default_factory=utc_now)
    created_at: datetime = field(default_factory=utc_now)
    personality: OCEANProfile = field(default_factory=OCEANProfile)
    dimensions: DimensionalState = field(default_factory=DimensionalState)
    baseline: DimensionalState = field(default_factory=DimensionalState)
    decay_rates: DimensionDecayRates = field(default_factory=DimensionDecayRates)
    emotion_decay_rates: EmotionDecayRates = field(default_factory=EmotionDecayRates)
    basic_emotions: BasicEmotions = field(default_factory=BasicEmotions)
    recent_stimuli: tuple[EmotionStimulus, ...] = ()
    rumination: tuple[RuminationEntry, ...] = ()
    users: Mapping[str, EmotionBucket] = field(default_factory=dict)
    agents: Mapping[str, EmotionBucket] = field(default_factory=dict)
    total_updates: int = 0

    def __post_init__(self):
        object.__setattr__(self, "recent_stimuli", tuple(self.recent_stimuli))
        object.__setattr__(self, "rumination", tuple(self.rumination))
        object.__setattr__(self, "users", _frozen_buckets(self.users))
        object.__setattr__(self, "agents", _frozen_buckets(self.agents))

    def to_document(self) -> StateDocument:
        """Convert to the persisted document layout."""
        return StateDocument(
            version=self.version,
            last_updated=self.last_updated,
            personality=self.personality.to_dict(),
            dimensions=self.dimensions.to_dict(),
            baseline=self.baseline.to_dict(),
            decay_rates=self.decay_rates.to_dict(),
            emotion_decay_rates=self.emotion_decay_rates.to_dict(),
            basic_emotions=self.basic_emotions.to_dict(),
            recent_stimuli=list(self.recent_stimuli),
            rumination=RuminationDocument(active=list(self.rumination)),
            users=dict(self.users),
            agents=dict(self.agents),
            meta=MetaDocument(total_updates=self.total_updates, created_at=self.created_at),
        )

    @classmethod
    def from_document(cls, doc: StateDocument) -> "EngineState":
        """Build a state from a persisted document.

        Baseline and both decay-rate maps are re-derived from the stored
        personality rather than trusted from disk, so a hand-edited or
        partially written document cannot break their consistency.
        """
        personality = OCEANProfile.from_dict(doc.personality)
        derived = derive(personality)
        return cls(
            version=doc.version,
            last_updated=doc.last_updated,
            created_at=doc.meta.created_at,
            personality=personality,
            dimensions=DimensionalState.from_dict(doc.dimensions),
            baseline=derived.baseline,
            decay_rates=derived.decay_rates,
            emotion_decay_rates=derived.emotion_decay_rates,
            basic_emotions=BasicEmotions.from_dict(doc.basic_emotions),
            recent_stimuli=tuple(doc.recent_stimuli),
            rumination=tuple(doc.rumination.active),
            users=doc.users,
            agents=doc.agents,
            total_updates=doc.meta.total_updates,
        )


def build_empty_state(
    personality: Optional[OCEANProfile] = None,
    now: Optional[datetime] = None,
) -> EngineState:
    """Canonical empty state.

    Dimensions start at the personality baseline, basic emotions at zero,
    with no history, rumination or tracked identities.
    """
    personality = personality or OCEANProfile()
    now = now or utc_now()
    derived = derive(personality)
    return EngineState(
        last_updated=now,
        created_at=now,
        personality=personality,
        dimensions=derived.baseline,
        baseline=derived.baseline,
        decay_rates=derived.decay_rates,
        emotion_decay_rates=derived.emotion_decay_rates,
    )
