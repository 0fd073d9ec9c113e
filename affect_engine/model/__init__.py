"""Affect model: bounded values, personality, decay, label mapping, rumination."""

from affect_engine.model.values import (
    BASIC_EMOTION_NAMES,
    DIMENSION_NAMES,
    OCEAN_TRAITS,
    BasicEmotions,
    DimensionalState,
    DimensionDecayRates,
    EmotionDecayRates,
    OCEANProfile,
    UnknownFieldError,
    clamp_bipolar,
    clamp_dimension,
    clamp_unipolar,
    overall_intensity,
    primary_emotion,
)
from affect_engine.model.personality import (
    PersonalityDerivation,
    compute_baseline,
    compute_dimension_decay_rates,
    compute_emotion_decay_rates,
    compute_response_intensity_multiplier,
    compute_rumination_probability,
    derive,
)
from affect_engine.model.decay import (
    DecayPreset,
    decay_basic_emotions,
    decay_dimensions,
    decay_toward_baseline,
    effective_decay_rates,
    rate_for_half_life,
)
from affect_engine.model.mapping import (
    EMOTION_MAPPINGS,
    LABEL_ALIASES,
    EmotionDelta,
    apply_emotion_mapping,
    canonical_label,
    get_emotion_mapping,
)
from affect_engine.model.taxonomy import (
    TaxonomyValidation,
    create_custom_mapping,
    merge_custom_mappings,
    validate_taxonomy,
)
from affect_engine.model.goals import (
    Goal,
    GoalModulation,
    GoalType,
    apply_goal_modulation,
    compute_goal_modulation,
    infer_goals,
)
from affect_engine.model.rumination import (
    RuminationPhase,
    advance_rumination,
    apply_rumination_effects,
    rumination_phase,
    should_start_rumination,
    start_rumination,
)

__all__ = [
    # Values
    "BASIC_EMOTION_NAMES",
    "DIMENSION_NAMES",
    "OCEAN_TRAITS",
    "BasicEmotions",
    "DimensionalState",
    "DimensionDecayRates",
    "EmotionDecayRates",
    "OCEANProfile",
    "UnknownFieldError",
    "clamp_bipolar",
    "clamp_dimension",
    "clamp_unipolar",
    "overall_intensity",
    "primary_emotion",
    # Personality
    "PersonalityDerivation",
    "compute_baseline",
    "compute_dimension_decay_rates",
    "compute_emotion_decay_rates",
    "compute_response_intensity_multiplier",
    "compute_rumination_probability",
    "derive",
    # Decay
    "DecayPreset",
    "decay_basic_emotions",
    "decay_dimensions",
    "decay_toward_baseline",
    "effective_decay_rates",
    "rate_for_half_life",
    # Mapping
    "EMOTION_MAPPINGS",
    "LABEL_ALIASES",
    "EmotionDelta",
    "apply_emotion_mapping",
    "canonical_label",
    "get_emotion_mapping",
    # Taxonomy
    "TaxonomyValidation",
    "create_custom_mapping",
    "merge_custom_mappings",
    "validate_taxonomy",
    # Goals
    "Goal",
    "GoalModulation",
    "GoalType",
    "apply_goal_modulation",
    "compute_goal_modulation",
    "infer_goals",
    # Rumination
    "RuminationPhase",
    "advance_rumination",
    "apply_rumination_effects",
    "rumination_phase",
    "should_start_rumination",
    "start_rumination",
]
