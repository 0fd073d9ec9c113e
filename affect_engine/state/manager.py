"""State manager: the orchestrator for the affective engine.

Composes the model layer into operations over EngineState:
- Persistence (load without lock, save under lock)
- Time-based decay
- Stimulus processing (intensity scaling, label mapping, history, rumination)
- Rumination lifecycle
- Direct manipulation and personality retuning
- User/agent emotion tracking

Every operation takes a state and returns a new one. Inputs are never
modified, so a caller can keep the previous state around for comparison
or rollback.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from affect_engine.config import EngineConfig
from affect_engine.model.decay import (
    decay_basic_emotions,
    decay_dimensions,
    effective_decay_rates,
    elapsed_hours,
)
from affect_engine.model.goals import apply_goal_modulation, infer_goals
from affect_engine.model.mapping import apply_emotion_mapping, normalize_label
from affect_engine.model.personality import (
    compute_response_intensity_multiplier,
    compute_rumination_probability,
    derive,
)
from affect_engine.model.rumination import (
    advance_rumination,
    apply_rumination_effects,
    should_start_rumination,
    start_rumination,
)
from affect_engine.model.values import (
    DIMENSION_NAMES,
    BasicEmotions,
    DimensionalState,
    clamp_unipolar,
)
from affect_engine.schemas import (
    ClassificationResult,
    EmotionBucket,
    EmotionStimulus,
    utc_now,
)
from affect_engine.state import store
from affect_engine.state.engine_state import EngineState

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600.0


class IdentityKind(str, Enum):
    """Which identity bucket a classified emotion belongs to."""
    USER = "user"
    AGENT = "agent"


# Source role recorded on stimuli for each identity kind
IDENTITY_SOURCE_ROLES = {
    IdentityKind.USER: "user",
    IdentityKind.AGENT: "assistant",
}


def dominant_label(
    stimuli: Iterable[EmotionStimulus],
    now: datetime,
    half_life_hours: float,
    window_hours: float,
) -> str:
    """Label with the most recency-weighted occurrences inside the window.

    Each stimulus counts 0.5 ** (age / half_life_hours). Stimuli from the
    future or older than window_hours are ignored. Returns "neutral" when
    nothing is in range.
    """
    weights: dict[str, float] = {}
    for stimulus in stimuli:
        age_hours = (now - stimulus.timestamp).total_seconds() / SECONDS_PER_HOUR
        if age_hours < 0 or age_hours > window_hours:
            continue
        weights[stimulus.label] = weights.get(stimulus.label, 0.0) + 0.5 ** (age_hours / half_life_hours)

    if not weights:
        return "neutral"
    label, weight = max(weights.items(), key=lambda item: item[1])
    return label if weight > 0 else "neutral"


class StateManager:
    """Pure state operations plus locked persistence for one state file.

    Args:
        state_path: Location of the persisted state document
        config: Engine configuration (defaults to EngineConfig())
        clock: Returns the current UTC time; injectable for tests
    """

    def __init__(
        self,
        state_path: str | Path,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.state_path = Path(state_path)
        self.config = config or EngineConfig()
        self._clock = clock
        self._mapping_table = self.config.mapping_table()

    @property
    def lock_path(self) -> Path:
        return store.lock_path_for(self.state_path)

    # ─────────────────────────────────────────────────────────────────────
    # State I/O
    # ─────────────────────────────────────────────────────────────────────

    def get_state(self) -> EngineState:
        """Load state from disk without locking (default state if missing or corrupt)."""
        return store.load_state(self.state_path)

    def save_state(self, state: EngineState) -> EngineState:
        """Stamp last_updated and persist under the lock.

        Returns:
            The state exactly as written

        Raises:
            StateLockedError: Another writer holds the lock
        """
        stamped = replace(state, last_updated=self._clock())
        store.save_state(self.state_path, stamped, self.config.lock_stale_ms)
        return stamped

    def update(self, transform: Callable[[EngineState], EngineState]) -> EngineState:
        """Read-modify-write: load, decay, transform, save.

        Returns:
            The saved state
        """
        state = self.apply_decay(self.get_state())
        return self.save_state(transform(state))

    # ─────────────────────────────────────────────────────────────────────
    # Decay
    # ─────────────────────────────────────────────────────────────────────

    def apply_decay(self, state: EngineState, now: Optional[datetime] = None) -> EngineState:
        """Decay dimensions and basic emotions for the time since last_updated."""
        now = now or self._clock()
        hours = elapsed_hours(state.last_updated, now)
        if hours <= 0:
            return state

        dimension_rates, emotion_rates = effective_decay_rates(
            state.decay_rates,
            state.emotion_decay_rates,
            self.config.decay_preset,
            self.config.decay_rate_overrides,
        )
        return replace(
            state,
            dimensions=decay_dimensions(state.dimensions, state.baseline, dimension_rates, hours),
            basic_emotions=decay_basic_emotions(state.basic_emotions, emotion_rates, hours),
            last_updated=now,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Stimulus Processing
    # ─────────────────────────────────────────────────────────────────────

    def effective_intensity(self, state: EngineState, label: str, intensity: float) -> float:
        """Intensity after personality (and optionally goal) scaling, in [0, 1]."""
        multiplier = compute_response_intensity_multiplier(state.personality)
        scaled = min(1.0, clamp_unipolar(intensity) * multiplier)
        if self.config.goal_modulation_enabled:
            scaled = apply_goal_modulation(infer_goals(state.personality), label, scaled)
        return scaled

    def apply_stimulus(
        self,
        state: EngineState,
        label: str,
        intensity: float,
        trigger: str = "",
        now: Optional[datetime] = None,
        source_role: str = "system",
        confidence: float = 1.0,
    ) -> EngineState:
        """Map a labelled stimulus onto the state, record it, maybe start rumination.

        Args:
            state: Current state
            label: Emotion label (aliases and case are resolved; unknown
                labels are recorded but change nothing)
            intensity: Raw intensity (0-1)
            trigger: What caused it
            now: Timestamp for the stimulus
            source_role: "user", "assistant" or "system"
            confidence: Classifier confidence (0-1)

        Returns:
            New state with total_updates incremented
        """
        now = now or self._clock()
        scaled = self.effective_intensity(state, label, intensity)

        dimensions, emotions = apply_emotion_mapping(
            state.dimensions, state.basic_emotions, label, scaled, self._mapping_table
        )

        stimulus = EmotionStimulus(
            timestamp=now,
            label=normalize_label(label),
            intensity=scaled,
            trigger=trigger,
            confidence=confidence,
            source_role=source_role,
        )
        recent = ((stimulus,) + state.recent_stimuli)[: self.config.max_history]

        rumination = state.rumination
        if self.config.rumination_enabled:
            probability = compute_rumination_probability(state.personality)
            if should_start_rumination(scaled, self.config.rumination_threshold, probability):
                rumination = start_rumination(rumination, stimulus, now)

        return replace(
            state,
            dimensions=dimensions,
            basic_emotions=emotions,
            recent_stimuli=recent,
            rumination=rumination,
            total_updates=state.total_updates + 1,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Rumination
    # ─────────────────────────────────────────────────────────────────────

    def advance_rumination(self, state: EngineState, now: Optional[datetime] = None) -> EngineState:
        """Apply each active entry's effect, then advance the entries one stage.

        Rumination is passive, so total_updates is left alone.
        """
        if not self.config.rumination_enabled or not state.rumination:
            return state

        dimensions, emotions = apply_rumination_effects(
            state.rumination, state.dimensions, state.basic_emotions, self._mapping_table
        )
        rumination = advance_rumination(
            state.rumination,
            self.config.rumination_max_stages,
            now=now or self._clock(),
        )
        return replace(state, dimensions=dimensions, basic_emotions=emotions, rumination=rumination)

    # ─────────────────────────────────────────────────────────────────────
    # Direct Manipulation
    # ─────────────────────────────────────────────────────────────────────

    def set_dimension(self, state: EngineState, name: str, value: float) -> EngineState:
        """Set one dimension to an absolute (clamped) value."""
        return replace(
            state,
            dimensions=state.dimensions.with_value(name, value),
            total_updates=state.total_updates + 1,
        )

    def apply_dimension_delta(self, state: EngineState, name: str, delta: float) -> EngineState:
        """Add a delta to one dimension (clamped)."""
        return replace(
            state,
            dimensions=state.dimensions.with_deltas({name: delta}),
            total_updates=state.total_updates + 1,
        )

    def set_personality_trait(self, state: EngineState, trait: str, value: float) -> EngineState:
        """Set a trait and recompute baseline and both decay-rate maps.

        Current dimension values are left where they are; they drift toward
        the new baseline through decay.
        """
        personality = state.personality.with_value(trait, value)
        derived = derive(personality)
        logger.debug(f"Personality trait '{trait}' set to {personality.get(trait):.2f}")
        return replace(
            state,
            personality=personality,
            baseline=derived.baseline,
            decay_rates=derived.decay_rates,
            emotion_decay_rates=derived.emotion_decay_rates,
            total_updates=state.total_updates + 1,
        )

    def reset_to_baseline(
        self,
        state: EngineState,
        dimensions: Optional[Sequence[str]] = None,
    ) -> EngineState:
        """Return dimensions to their baseline.

        With no dimensions named (None or empty) this is a full reset that
        also zeroes the basic emotions and clears rumination. A partial
        reset touches only the named dimensions.
        """
        full_reset = not dimensions
        names = DIMENSION_NAMES if full_reset else [DimensionalState.check_name(n) for n in dimensions]
        reset_dims = {name: state.baseline.get(name) for name in names}

        basic_emotions = state.basic_emotions
        rumination = state.rumination
        if full_reset:
            basic_emotions = BasicEmotions()
            rumination = ()

        return replace(
            state,
            dimensions=replace(state.dimensions, **reset_dims),
            basic_emotions=basic_emotions,
            rumination=rumination,
            total_updates=state.total_updates + 1,
        )

    # ─────────────────────────────────────────────────────────────────────
    # User / Agent Emotion Tracking
    # ─────────────────────────────────────────────────────────────────────

    def record_identity_emotion(
        self,
        state: EngineState,
        kind: IdentityKind,
        key: str,
        result: ClassificationResult,
        now: Optional[datetime] = None,
    ) -> EngineState:
        """Push a classified emotion onto a user's or agent's bucket."""
        kind = IdentityKind(kind)
        stimulus = EmotionStimulus(
            timestamp=now or self._clock(),
            label=result.label,
            intensity=result.intensity,
            trigger=result.reason,
            confidence=result.confidence,
            source_role=IDENTITY_SOURCE_ROLES[kind],
        )

        buckets = state.users if kind is IdentityKind.USER else state.agents
        previous = buckets.get(key, EmotionBucket())
        bucket = EmotionBucket(
            latest=stimulus,
            history=((stimulus,) + previous.history)[: self.config.max_history],
        )
        updated = {**buckets, key: bucket}

        if kind is IdentityKind.USER:
            return replace(state, users=updated)
        return replace(state, agents=updated)

    def update_user_emotion(
        self, state: EngineState, user_key: str, result: ClassificationResult, now: Optional[datetime] = None
    ) -> EngineState:
        return self.record_identity_emotion(state, IdentityKind.USER, user_key, result, now)

    def update_agent_emotion(
        self, state: EngineState, agent_id: str, result: ClassificationResult, now: Optional[datetime] = None
    ) -> EngineState:
        return self.record_identity_emotion(state, IdentityKind.AGENT, agent_id, result, now)

    # ─────────────────────────────────────────────────────────────────────
    # Views
    # ─────────────────────────────────────────────────────────────────────

    def primary_emotion(self, state: EngineState) -> str:
        return state.basic_emotions.primary()

    def overall_intensity(self, state: EngineState) -> float:
        return state.basic_emotions.overall_intensity()

    def dominant_label(self, state: EngineState, now: Optional[datetime] = None) -> str:
        """Recency-weighted dominant label over the configured trend window."""
        return dominant_label(
            state.recent_stimuli,
            now or self._clock(),
            self.config.half_life_hours,
            self.config.trend_window_hours,
        )
