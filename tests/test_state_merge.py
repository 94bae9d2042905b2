"""Tests for the creative-state merge."""

from hook_workshop.schemas.hook import CreativeState
from hook_workshop.services.state_merge import merge_state_update


def _state(**kwargs):
    return CreativeState(**kwargs)


class TestScalarFields:
    def test_non_empty_value_overwrites(self):
        merged = merge_state_update(_state(stakes="her job"), _state(stakes="her brother's life"))
        assert merged.stakes == "her brother's life"

    def test_blank_value_is_ignored(self):
        current = _state(stakes="her job", hook_engine="heist")
        merged = merge_state_update(current, _state(stakes="", hook_engine="   "))
        assert merged.stakes == "her job"
        assert merged.hook_engine == "heist"

    def test_missing_value_is_ignored(self):
        merged = merge_state_update(_state(setting_anchor="flooded bank"), _state())
        assert merged.setting_anchor == "flooded bank"

    def test_unset_field_gets_filled(self):
        merged = merge_state_update(_state(), _state(antagonist_form="a debt collector guild"))
        assert merged.antagonist_form == "a debt collector guild"


class TestSetFields:
    def test_lists_are_unioned_in_first_seen_order(self):
        current = _state(tone_chips=["noir", "wry"])
        merged = merge_state_update(current, _state(tone_chips=["wry", "tense"]))
        assert merged.tone_chips == ["noir", "wry", "tense"]

    def test_lists_never_shrink(self):
        current = _state(bans=["chosen one", "amnesia"])
        merged = merge_state_update(current, _state(bans=[]))
        assert merged.bans == ["chosen one", "amnesia"]

    def test_none_incoming_list_keeps_absent_field_absent(self):
        merged = merge_state_update(_state(), _state(stakes="rent"))
        assert merged.bans is None
        assert merged.tone_chips is None

    def test_duplicates_within_update_are_dropped(self):
        merged = merge_state_update(_state(), _state(bans=["zombies", "zombies"]))
        assert merged.bans == ["zombies"]


class TestMergeProperties:
    def test_merging_same_update_twice_is_idempotent(self):
        current = _state(stakes="rent", tone_chips=["noir"])
        update = _state(stakes="her sister", tone_chips=["noir", "tense"], bans=["dream sequence"])

        once = merge_state_update(current, update)
        twice = merge_state_update(once, update)

        assert twice == once

    def test_inputs_are_not_mutated(self):
        current = _state(tone_chips=["noir"])
        update = _state(tone_chips=["tense"])
        merge_state_update(current, update)
        assert current.tone_chips == ["noir"]
        assert update.tone_chips == ["tense"]

    def test_none_update_returns_equal_copy(self):
        current = _state(stakes="rent")
        merged = merge_state_update(current, None)
        assert merged == current
        assert merged is not current
