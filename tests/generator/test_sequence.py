"""
Unit tests for SequenceGenerator and the attempt budget.
"""

import logging
import random

import pytest

from abacus_toolkit.core.errors import ConfigInvalidError
from abacus_toolkit.generator import (
    FALLBACK_EXAMPLE,
    MultiDigitComposer,
    SequenceGenerator,
    attempt_budget,
    compose_columns,
)
from abacus_toolkit.rules import BrothersRule, FriendsRule, MixRule, RuleConfig, SimpleRule


def _digits(value: int, width: int):
    return [int(ch) for ch in str(value).zfill(width)]


class TestAttemptBudget:
    """Tests for attempt_budget and the fallback example."""

    @pytest.mark.parametrize(
        "digit_count,combine_levels,expected",
        [(1, False, 100), (1, True, 100), (2, True, 200), (3, False, 400), (4, True, 250), (9, False, 500)],
    )
    def test_attempt_budget_when_called_then_matches_policy(self, digit_count, combine_levels, expected):
        assert attempt_budget(digit_count, combine_levels) == expected

    def test_fallback_example_when_inspected_then_self_consistent(self):
        assert FALLBACK_EXAMPLE.start == 0
        assert FALLBACK_EXAMPLE.actions == (1, 1, -1)
        assert FALLBACK_EXAMPLE.answer == 1
        assert FALLBACK_EXAMPLE.is_consistent

    def test_compose_columns_when_called_then_most_significant_first(self):
        assert compose_columns([1, 0, 4]) == 104


class TestSequenceGeneratorSingleColumn:
    """Tests for single-column generation."""

    def test_generate_when_four_bead_simple_then_three_steps_in_bounds(self, four_bead_config):
        # Arrange
        generator = SequenceGenerator(SimpleRule(four_bead_config, random.Random(3)))

        for _ in range(50):
            # Act
            result = generator.generate_result()
            example = result.example

            # Assert
            assert result.used_fallback is False
            assert example.start == 0
            assert example.step_count == 3
            assert all(0 <= total <= 4 for total in example.running_totals)
            assert example.actions[0] > 0

    def test_generate_when_state_returns_to_zero_then_next_action_positive(self):
        rule = SimpleRule(RuleConfig(selected_digits=(1, 2, 3, 4), min_steps=6, max_steps=6), random.Random(5))
        generator = SequenceGenerator(rule)

        for _ in range(50):
            example = generator.generate()
            for step, following in zip(example.steps, example.steps[1:]):
                if step.to_state == 0:
                    assert following.action > 0

    def test_generate_when_only_addition_then_no_negative_actions(self):
        config = RuleConfig(selected_digits=(4,), min_steps=2, max_steps=3, only_addition=True)
        generator = SequenceGenerator(BrothersRule(config, random.Random(11)))

        for _ in range(30):
            result = generator.generate_result()
            assert result.used_fallback is False
            assert all(action > 0 for action in result.example.actions)

    def test_generate_when_brothers_then_contains_signature_step(self):
        rule = BrothersRule(RuleConfig(selected_digits=(4,)), random.Random(2))
        generator = SequenceGenerator(rule)

        for _ in range(30):
            result = generator.generate_result()
            assert result.used_fallback is False
            assert any(rule.is_signature_transition(s.from_state, s.to_state) for s in result.example.steps)

    def test_generate_when_friends_then_stays_within_two_columns(self):
        rule = FriendsRule(RuleConfig(selected_digits=(9, 8), digit_count=2), random.Random(4))
        generator = SequenceGenerator(rule)

        for _ in range(20):
            example = generator.generate()
            assert all(0 <= total <= 99 for total in example.running_totals)
            assert rule.validate_example(example)

    def test_generate_when_mix_then_contains_signature_step(self):
        rule = MixRule(RuleConfig(selected_digits=(6, 7, 8, 9), digit_count=2), random.Random(6))
        generator = SequenceGenerator(rule)

        for _ in range(20):
            result = generator.generate_result()
            assert result.used_fallback is False
            assert all(0 <= total <= 99 for total in result.example.running_totals)
            assert any(rule.is_signature_transition(s.from_state, s.to_state) for s in result.example.steps)

    def test_generate_when_same_seed_then_same_example(self, four_bead_config):
        first = SequenceGenerator(SimpleRule(four_bead_config, random.Random(9))).generate()
        second = SequenceGenerator(SimpleRule(four_bead_config, random.Random(9))).generate()

        assert first == second


class TestSequenceGeneratorFailures:
    """Tests for truncation, budget exhaustion and fallback."""

    def test_generate_when_max_steps_smaller_then_truncates(self, four_bead_config):
        # Arrange
        generator = SequenceGenerator(SimpleRule(four_bead_config, random.Random(1)), max_steps=2)

        # Act
        example = generator.generate()

        # Assert
        assert example.step_count == 2
        assert example.answer == sum(example.actions)

    def test_init_when_max_steps_zero_then_raises_error(self, four_bead_config):
        with pytest.raises(ConfigInvalidError, match="max_steps"):
            SequenceGenerator(SimpleRule(four_bead_config), max_steps=0)

    def test_generate_when_only_subtraction_then_returns_fallback(self, caplog):
        # Arrange: the first step must be positive, so nothing is ever available
        rule = SimpleRule(RuleConfig(selected_digits=(1, 2), only_subtraction=True), random.Random(0))
        generator = SequenceGenerator(rule)

        # Act
        with caplog.at_level(logging.WARNING, logger="abacus_toolkit.generator.sequence"):
            result = generator.generate_result()

        # Assert
        assert result.example is FALLBACK_EXAMPLE
        assert result.used_fallback is True
        assert result.attempts == 100
        assert "fallback" in caplog.text

    def test_generate_when_contradictory_flags_then_never_raises(self):
        config = RuleConfig(selected_digits=(1,), only_addition=True, only_subtraction=True)
        generator = SequenceGenerator(SimpleRule(config, random.Random(0)), max_attempts=5)

        assert generator.generate() == FALLBACK_EXAMPLE


class TestSequenceGeneratorVector:
    """Tests for multi-column vector modes."""

    def test_generate_when_independent_columns_then_each_column_in_bounds(self):
        # Arrange
        config = RuleConfig(selected_digits=(1, 2, 3, 4), min_steps=4, max_steps=4, digit_count=3)
        generator = SequenceGenerator(SimpleRule(config, random.Random(21)))

        # Act
        result = generator.generate_result()

        # Assert
        assert generator.is_vector and not generator.is_lock_step
        assert generator.attempt_limit == 400
        assert result.used_fallback is False
        assert result.example.is_consistent
        for total in result.example.running_totals:
            assert all(d <= 4 for d in _digits(total, 3))

    def test_generate_when_lock_step_then_actions_are_repunit_multiples(self):
        config = RuleConfig(
            selected_digits=(1, 2, 3, 4), min_steps=3, max_steps=3, digit_count=3, combine_levels=True
        )
        generator = SequenceGenerator(SimpleRule(config, random.Random(8)))

        example = generator.generate()

        assert all(action % 111 == 0 for action in example.actions)
        for total in example.running_totals:
            assert len(set(_digits(total, 3))) == 1

    def test_generate_when_lock_step_brothers_then_signature_present(self):
        config = RuleConfig(selected_digits=(4,), min_steps=3, max_steps=3, digit_count=2, combine_levels=True)
        rule = BrothersRule(config, random.Random(13))

        result = SequenceGenerator(rule).generate_result()

        assert result.used_fallback is False
        assert any(
            rule.is_signature_transition(s.from_state // 11, s.to_state // 11) for s in result.example.steps
        )

    def test_generate_when_wrapping_composer_then_delegates(self):
        rule = SimpleRule(RuleConfig(selected_digits=(1, 2, 3), digit_count=2), random.Random(6))
        composer = MultiDigitComposer(rule, 2)

        example = SequenceGenerator(composer).generate()

        assert all(0 <= total < 1000 for total in example.running_totals)
