"""
Unit tests for rule selection.
"""

import random

import pytest

from abacus_toolkit.core.errors import ConfigInvalidError
from abacus_toolkit.generator import (
    MultiDigitComposer,
    WorksheetConfig,
    active_kind,
    build_rule_config,
    select_rule,
)
from abacus_toolkit.rules import BlockSettings, BrothersRule, FriendsRule, MixRule, RuleKind, SimpleRule


class TestActiveKind:
    """Tests for active_kind."""

    def test_active_kind_when_several_blocks_then_most_advanced_wins(self):
        blocks = {
            "simple": BlockSettings(digits=(1, 2)),
            "brothers": BlockSettings(digits=(4,)),
        }

        assert active_kind(blocks) is RuleKind.BROTHERS

    def test_active_kind_when_mix_selected_then_mix(self):
        blocks = {
            "friends": BlockSettings(digits=(9,)),
            "mix": BlockSettings(digits=(7,)),
        }

        assert active_kind(blocks) is RuleKind.MIX

    def test_active_kind_when_nothing_selected_then_raises_error(self):
        with pytest.raises(ConfigInvalidError):
            active_kind({"simple": BlockSettings()})


class TestSelectRule:
    """Tests for build_rule_config and select_rule."""

    def test_build_rule_config_when_block_flags_then_copied(self):
        # Arrange
        config = WorksheetConfig(
            actions_count=4,
            blocks={"brothers": BlockSettings(digits=(4, 3), only_addition=True)},
        )

        # Act
        rule_config = build_rule_config(config, RuleKind.BROTHERS)

        # Assert
        assert rule_config.selected_digits == (4, 3)
        assert rule_config.only_addition is True
        assert (rule_config.min_steps, rule_config.max_steps) == (4, 4)

    def test_select_rule_when_single_digit_simple_then_rule(self):
        config = WorksheetConfig(blocks={"simple": BlockSettings(digits=(1, 2, 7))})

        rule = select_rule(config, random.Random(0))

        assert isinstance(rule, SimpleRule)
        assert rule.max_state == 9

    def test_select_rule_when_single_digit_brothers_then_rule(self):
        config = WorksheetConfig(
            blocks={"simple": BlockSettings(digits=(1, 2)), "brothers": BlockSettings(digits=(4,))}
        )

        rule = select_rule(config, random.Random(0))

        assert isinstance(rule, BrothersRule)
        assert rule.config.filler_digits == (1, 2)

    def test_select_rule_when_multi_digit_friends_then_composer(self):
        # Arrange
        config = WorksheetConfig(
            digit_count=2,
            combine_levels=True,
            blocks={"friends": BlockSettings(digits=(9, 8))},
        )

        # Act
        composer = select_rule(config, random.Random(0))

        # Assert
        assert isinstance(composer, MultiDigitComposer)
        assert isinstance(composer.rule, FriendsRule)
        assert composer.display_digit_count == 2
        assert composer.variable_digit_counts is True

    def test_select_rule_when_mix_then_mix_rule_wrapped(self):
        config = WorksheetConfig(digit_count=3, blocks={"mix": BlockSettings(digits=(6, 7))})

        composer = select_rule(config, random.Random(0))

        assert isinstance(composer.rule, MixRule)
        assert composer.kind is RuleKind.MIX

    def test_select_rule_when_block_has_zero_then_pool_keeps_it(self):
        config = WorksheetConfig(digit_count=2, blocks={"simple": BlockSettings(digits=(0, 1, 2))})

        composer = select_rule(config, random.Random(0))

        assert composer.digit_pool == (0, 1, 2)
        assert composer.rule.config.selected_digits == (1, 2)

    def test_select_rule_when_digits_do_not_fit_technique_then_raises_error(self):
        config = WorksheetConfig(blocks={"brothers": BlockSettings(digits=(6,))})

        with pytest.raises(ConfigInvalidError, match="Brothers digits"):
            select_rule(config, random.Random(0))
