"""Tests for the rumination automaton."""
from datetime import timedelta

import pytest

from affect_engine.model.rumination import (
    MIN_RUMINATION_INTENSITY,
    RuminationPhase,
    advance_rumination,
    apply_rumination_effects,
    rumination_phase,
    should_start_rumination,
    start_rumination,
)
from affect_engine.model.values import BasicEmotions, DimensionalState
from affect_engine.schemas import EmotionStimulus, RuminationEntry


def make_stimulus(label="angry", intensity=0.9, now=None):
    kwargs = {"label": label, "intensity": intensity, "trigger": "test"}
    if now is not None:
        kwargs["timestamp"] = now
    return EmotionStimulus(**kwargs)


class TestShouldStartRumination:
    """Test the personality-adjusted start threshold."""

    def test_above_adjusted_threshold(self):
        # 0.7 + 0.5 * 0.3 = 0.85
        assert should_start_rumination(0.9, 0.7, 0.5)

    def test_below_adjusted_threshold(self):
        assert not should_start_rumination(0.8, 0.7, 0.5)

    def test_threshold_is_strict(self):
        assert not should_start_rumination(0.85, 0.7, 0.5)

    def test_low_probability_lowers_bar(self):
        assert should_start_rumination(0.75, 0.7, 0.0)


class TestStartRumination:
    """Test starting rumination entries."""

    def test_creates_stage_zero_entry(self, now):
        stimulus = make_stimulus()
        entries = start_rumination((), stimulus, now)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.stimulus_id == stimulus.id
        assert entry.label == "angry"
        assert entry.stage == 0
        assert entry.intensity == 0.9
        assert entry.last_stage_timestamp == now

    def test_duplicate_stimulus_is_noop(self, now):
        stimulus = make_stimulus()
        entries = start_rumination((), stimulus, now)
        assert start_rumination(entries, stimulus, now) == entries

    def test_different_stimuli_both_tracked(self, now):
        entries = start_rumination((), make_stimulus(), now)
        entries = start_rumination(entries, make_stimulus("sad"), now)
        assert [e.label for e in entries] == ["angry", "sad"]


class TestAdvanceRumination:
    """Test stage advancement and expiry."""

    def test_intensity_decays_and_stage_increments(self, now):
        entries = start_rumination((), make_stimulus(intensity=0.8), now)
        later = now + timedelta(minutes=5)
        advanced = advance_rumination(entries, max_stages=4, now=later)
        assert advanced[0].intensity == pytest.approx(0.64)
        assert advanced[0].stage == 1
        assert advanced[0].last_stage_timestamp == later

    def test_removed_at_max_stages(self, now):
        entries = start_rumination((), make_stimulus(intensity=0.9), now)
        for _ in range(3):
            entries = advance_rumination(entries, max_stages=4, now=now)
            assert len(entries) == 1
        entries = advance_rumination(entries, max_stages=4, now=now)
        assert entries == ()

    def test_removed_below_min_intensity(self, now):
        # 0.1 * 0.8^4 = 0.041 < 0.05
        entries = start_rumination((), make_stimulus(intensity=0.1), now)
        for _ in range(3):
            entries = advance_rumination(entries, max_stages=10, now=now)
            assert len(entries) == 1
        entries = advance_rumination(entries, max_stages=10, now=now)
        assert entries == ()

    def test_empty_is_noop(self, now):
        assert advance_rumination((), max_stages=4, now=now) == ()

    def test_terminates_within_max_stages_plus_one(self, now):
        for intensity in (0.05, 0.3, 0.7, 1.0):
            for max_stages in (1, 2, 4, 8):
                entries = start_rumination((), make_stimulus(intensity=intensity), now)
                for _ in range(max_stages + 1):
                    entries = advance_rumination(entries, max_stages=max_stages, now=now)
                assert entries == ()

    def test_input_not_modified(self, now):
        entries = start_rumination((), make_stimulus(intensity=0.8), now)
        advance_rumination(entries, max_stages=4, now=now)
        assert entries[0].stage == 0
        assert entries[0].intensity == 0.8


class TestRuminationEffects:
    """Test re-application of ruminating emotions."""

    def test_effects_scaled_by_entry_intensity(self, now):
        entries = start_rumination((), make_stimulus("angry", 0.5), now)
        dims, emos = apply_rumination_effects(entries, DimensionalState(), BasicEmotions())
        assert emos.anger == pytest.approx(0.15)
        assert dims.pleasure == pytest.approx(-0.075)

    def test_no_entries_no_change(self):
        dims = DimensionalState(pleasure=0.2)
        emos = BasicEmotions(fear=0.1)
        assert apply_rumination_effects((), dims, emos) == (dims, emos)


class TestRuminationPhase:
    """Test entry phase classification."""

    def test_absent(self):
        assert rumination_phase(None) is RuminationPhase.ABSENT

    def test_active(self):
        entry = RuminationEntry(stimulus_id="s1", label="sad", stage=1, intensity=0.5)
        assert rumination_phase(entry, max_stages=4) is RuminationPhase.ACTIVE

    def test_expired_by_stage(self):
        entry = RuminationEntry(stimulus_id="s1", label="sad", stage=4, intensity=0.5)
        assert rumination_phase(entry, max_stages=4) is RuminationPhase.EXPIRED

    def test_expired_by_intensity(self):
        entry = RuminationEntry(
            stimulus_id="s1", label="sad", stage=0, intensity=MIN_RUMINATION_INTENSITY / 2
        )
        assert rumination_phase(entry) is RuminationPhase.EXPIRED
