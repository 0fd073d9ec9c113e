"""Tests for the bounded value model."""
import pytest

from affect_engine.model.values import (
    BASIC_EMOTION_NAMES,
    DIMENSION_NAMES,
    BasicEmotions,
    DimensionalState,
    DimensionDecayRates,
    OCEANProfile,
    UnknownFieldError,
    clamp_bipolar,
    clamp_dimension,
    clamp_unipolar,
    overall_intensity,
    primary_emotion,
)


class TestClamping:
    """Test scalar clamp helpers."""

    def test_clamp_bipolar(self):
        assert clamp_bipolar(1.7) == 1.0
        assert clamp_bipolar(-3.0) == -1.0
        assert clamp_bipolar(0.25) == 0.25

    def test_clamp_unipolar(self):
        assert clamp_unipolar(1.2) == 1.0
        assert clamp_unipolar(-0.1) == 0.0
        assert clamp_unipolar(0.4) == 0.4

    def test_clamp_dimension_routes_by_range(self):
        """PAD dimensions allow negatives, extensions do not."""
        assert clamp_dimension("pleasure", -0.8) == -0.8
        assert clamp_dimension("trust", -0.8) == 0.0

    def test_clamp_dimension_unknown_name(self):
        with pytest.raises(UnknownFieldError) as exc_info:
            clamp_dimension("valence", 0.5)
        assert exc_info.value.name == "valence"
        assert "pleasure" in exc_info.value.valid


class TestDimensionalState:
    """Test DimensionalState construction and updates."""

    def test_defaults_are_neutral(self):
        state = DimensionalState()
        assert state.pleasure == 0.0
        assert state.arousal == 0.0
        assert state.dominance == 0.0
        assert state.connection == 0.5
        assert state.curiosity == 0.5
        assert state.energy == 0.5
        assert state.trust == 0.5

    def test_construction_clamps(self):
        """Out-of-range input saturates instead of raising."""
        state = DimensionalState(pleasure=5.0, arousal=-5.0, trust=2.0, energy=-1.0)
        assert state.pleasure == 1.0
        assert state.arousal == -1.0
        assert state.trust == 1.0
        assert state.energy == 0.0

    def test_frozen(self):
        state = DimensionalState()
        with pytest.raises(AttributeError):
            state.pleasure = 0.5

    def test_with_value_returns_new(self):
        state = DimensionalState()
        updated = state.with_value("arousal", 0.6)
        assert updated.arousal == 0.6
        assert state.arousal == 0.0

    def test_with_value_clamps(self):
        assert DimensionalState().with_value("curiosity", 3.0).curiosity == 1.0

    def test_with_deltas_scaled(self):
        state = DimensionalState().with_deltas({"pleasure": 0.2, "energy": -0.1}, scale=0.5)
        assert state.pleasure == pytest.approx(0.1)
        assert state.energy == pytest.approx(0.45)

    def test_with_deltas_unknown_name(self):
        with pytest.raises(UnknownFieldError):
            DimensionalState().with_deltas({"happiness": 0.1})

    def test_get_unknown_name(self):
        with pytest.raises(UnknownFieldError):
            DimensionalState().get("mood")

    def test_dict_round_trip(self):
        state = DimensionalState(pleasure=-0.3, curiosity=0.9)
        assert DimensionalState.from_dict(state.to_dict()) == state

    def test_from_dict_partial_and_garbage(self):
        """Missing, unknown and non-numeric entries fall back to defaults."""
        state = DimensionalState.from_dict({"pleasure": 0.4, "trust": "high", "mood": 1.0})
        assert state.pleasure == 0.4
        assert state.trust == 0.5
        assert state.arousal == 0.0

    def test_to_vector_order(self):
        vec = DimensionalState(pleasure=0.1, trust=0.9).to_vector()
        assert len(vec) == len(DIMENSION_NAMES)
        assert vec[0] == 0.1
        assert vec[-1] == 0.9


class TestBasicEmotions:
    """Test basic emotions and their read-only views."""

    def test_construction_clamps(self):
        emotions = BasicEmotions(happiness=1.5, fear=-0.2)
        assert emotions.happiness == 1.0
        assert emotions.fear == 0.0

    def test_primary_emotion(self):
        emotions = BasicEmotions(anger=0.6, sadness=0.3)
        assert emotions.primary() == "anger"
        assert primary_emotion(emotions) == "anger"

    def test_primary_emotion_neutral_below_epsilon(self):
        assert primary_emotion(BasicEmotions()) == "neutral"
        assert primary_emotion(BasicEmotions(surprise=0.005)) == "neutral"

    def test_overall_intensity_is_max(self):
        emotions = BasicEmotions(happiness=0.2, fear=0.7, disgust=0.1)
        assert overall_intensity(emotions) == 0.7

    def test_unknown_emotion(self):
        with pytest.raises(UnknownFieldError) as exc_info:
            BasicEmotions().with_value("joy", 0.5)
        assert exc_info.value.kind == "emotion"
        assert set(exc_info.value.valid) == set(BASIC_EMOTION_NAMES)


class TestOCEANProfile:
    """Test the personality profile vector."""

    def test_defaults_midpoint(self):
        profile = OCEANProfile()
        assert all(v == 0.5 for v in profile.to_vector())

    def test_clamps(self):
        assert OCEANProfile(neuroticism=1.4).neuroticism == 1.0

    def test_deviation(self):
        assert OCEANProfile(openness=0.8).deviation("openness") == pytest.approx(0.3)

    def test_unknown_trait(self):
        with pytest.raises(UnknownFieldError):
            OCEANProfile().with_value("humor", 0.5)


class TestDecayRates:
    """Test decay-rate vectors."""

    def test_rates_never_negative(self):
        assert DimensionDecayRates(pleasure=-1.0).pleasure == 0.0

    def test_unknown_rate_name(self):
        with pytest.raises(UnknownFieldError):
            DimensionDecayRates().with_value("happiness", 0.1)
