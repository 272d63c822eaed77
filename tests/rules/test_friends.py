"""
Unit tests for FriendsRule.
"""

import pytest

from abacus_toolkit.core.errors import ConfigInvalidError
from abacus_toolkit.core.models import Example, MicroStep
from abacus_toolkit.rules import FriendsRule, RuleConfig
from abacus_toolkit.rules.friends import crosses_ten, friend_of


@pytest.fixture
def rule(rng):
    return FriendsRule(RuleConfig(selected_digits=(9,), digit_count=2), rng)


class TestFriendTransitions:
    """Tests for the friend transition table."""

    def test_friend_of_when_called_then_complements_to_ten(self):
        assert [friend_of(d) for d in (1, 5, 9)] == [9, 5, 1]

    @pytest.mark.parametrize("pair", [(13, 22), (5, 14)])
    def test_is_signature_transition_when_units_overflow_then_true(self, rule, pair):
        assert rule.is_signature_transition(*pair) is True

    def test_is_signature_transition_when_units_borrow_then_true(self, rule):
        assert rule.is_signature_transition(22, 13) is True

    def test_is_signature_transition_when_no_carry_then_false(self, rule):
        assert rule.is_signature_transition(0, 9) is False
        assert rule.is_signature_transition(19, 10) is False

    def test_crosses_ten_when_tens_full_then_false(self):
        assert crosses_ten(95, 9) is False

    def test_crosses_ten_when_tens_empty_then_false(self):
        assert crosses_ten(3, -9) is False

    def test_init_when_single_column_then_raises_error(self):
        with pytest.raises(ConfigInvalidError, match="requires digit_count"):
            FriendsRule(RuleConfig(selected_digits=(9,)))

    def test_init_when_zero_digit_then_raises_error(self):
        with pytest.raises(ConfigInvalidError, match="Friends digits"):
            FriendsRule(RuleConfig(selected_digits=(0, 9), digit_count=2))


class TestFriendsRuleBehaviour:
    """Tests for FriendsRule actions, decomposition and validation."""

    def test_properties_when_created_then_two_columns(self, rule):
        assert rule.max_state == 99
        assert rule.column_width == 2
        assert rule.signature_weight == 5

    def test_get_available_actions_when_first_step_then_only_positive(self, rule):
        actions = rule.get_available_actions(0, is_first=True)

        assert actions
        assert all(action > 0 for action in actions)

    def test_get_available_actions_when_friend_reachable_then_weighted(self, rule):
        actions = rule.get_available_actions(13, is_first=False)

        assert actions.count(9) == 5

    def test_decompose_action_when_adding_nine_then_ten_minus_one(self, rule):
        assert rule.decompose_action(13, 9) == [MicroStep(10, "ten"), MicroStep(-1, "units")]

    def test_decompose_action_when_subtracting_nine_then_minus_ten_plus_one(self, rule):
        assert rule.decompose_action(22, -9) == [MicroStep(-10, "ten"), MicroStep(1, "units")]

    def test_decompose_action_when_every_signature_then_sums_to_action(self):
        rule = FriendsRule(RuleConfig(selected_digits=tuple(range(1, 10)), digit_count=2))

        for from_state, to_state in rule.transitions:
            micro = rule.decompose_action(from_state, to_state - from_state)
            assert sum(m.action for m in micro) == to_state - from_state

    def test_validate_example_when_friend_step_then_true(self, rule):
        assert rule.validate_example(Example.from_actions(0, [5, 9])) is True

    def test_validate_example_when_no_friend_step_then_false(self, rule):
        assert rule.validate_example(Example.from_actions(0, [1, 2])) is False

    def test_is_legal_move_when_within_two_columns_then_true(self, rule):
        assert rule.is_legal_move(13, 7) is True
        assert rule.is_legal_move(95, 7) is False
        assert rule.is_legal_move(3, -4) is False
