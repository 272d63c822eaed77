"""
Unit tests for RuleConfig and BlockSettings.
"""

import logging

import pytest

from abacus_toolkit.core.errors import ConfigInvalidError
from abacus_toolkit.rules import BlockSettings, RuleConfig


class TestBlockSettings:
    """Tests for BlockSettings dataclass."""

    def test_init_when_duplicate_digits_then_deduplicates_in_order(self):
        block = BlockSettings(digits=[3, 1, 3])

        assert block.digits == (3, 1)
        assert block.is_active is True

    def test_init_when_no_digits_then_inactive(self):
        assert BlockSettings().is_active is False

    def test_init_when_digit_out_of_range_then_raises_error(self):
        with pytest.raises(ConfigInvalidError, match="Block digits"):
            BlockSettings(digits=(4, 10))

    def test_from_dict_when_camel_case_then_reads_flags(self):
        # Act
        block = BlockSettings.from_dict({"digits": [1, 2], "onlyAddition": True})

        # Assert
        assert block.digits == (1, 2)
        assert block.only_addition is True
        assert block.only_subtraction is False

    def test_from_dict_when_unknown_key_then_raises_error(self):
        with pytest.raises(ConfigInvalidError, match="Unknown block settings"):
            BlockSettings.from_dict({"digits": [1], "colour": "red"})


class TestRuleConfig:
    """Tests for RuleConfig dataclass."""

    def test_init_when_valid_params_then_creates_config(self):
        config = RuleConfig(selected_digits=[2, 1, 2], min_steps=2, max_steps=4)

        assert config.selected_digits == (2, 1)
        assert config.min_steps == 2
        assert config.max_steps == 4
        assert config.digit_count == 1

    def test_init_when_no_digits_then_raises_error(self):
        with pytest.raises(ConfigInvalidError, match="selected_digits must not be empty"):
            RuleConfig(selected_digits=())

    def test_init_when_zero_min_steps_then_raises_error(self):
        with pytest.raises(ConfigInvalidError, match="min_steps must be positive"):
            RuleConfig(selected_digits=(1,), min_steps=0)

    def test_init_when_max_less_than_min_then_raises_error(self):
        with pytest.raises(ConfigInvalidError, match="max_steps"):
            RuleConfig(selected_digits=(1,), min_steps=5, max_steps=3)

    @pytest.mark.parametrize("digit_count", [0, 10])
    def test_init_when_digit_count_out_of_range_then_raises_error(self, digit_count):
        with pytest.raises(ConfigInvalidError, match="digit_count"):
            RuleConfig(selected_digits=(1,), digit_count=digit_count)

    def test_init_when_priority_above_one_then_raises_error(self):
        with pytest.raises(ConfigInvalidError, match="signature_priority"):
            RuleConfig(selected_digits=(1,), signature_priority=1.5)

    def test_init_when_unknown_block_then_raises_error(self):
        with pytest.raises(ConfigInvalidError, match="Unknown blocks"):
            RuleConfig(selected_digits=(1,), blocks={"tens": BlockSettings(digits=(1,))})

    def test_init_when_block_not_settings_then_raises_error(self):
        with pytest.raises(ConfigInvalidError, match="must be BlockSettings"):
            RuleConfig(selected_digits=(1,), blocks={"simple": {"digits": [1]}})

    def test_init_when_both_only_flags_then_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="abacus_toolkit.rules.config"):
            RuleConfig(selected_digits=(1,), only_addition=True, only_subtraction=True)

        assert "only_addition and only_subtraction" in caplog.text

    def test_config_invalid_error_when_raised_then_is_value_error(self):
        with pytest.raises(ValueError):
            RuleConfig(selected_digits=())

    def test_filler_digits_when_no_simple_block_then_returns_default(self):
        config = RuleConfig(selected_digits=(4,))

        assert config.filler_digits == (1, 2, 3, 4, 5)

    def test_filler_digits_when_simple_block_then_drops_zero(self):
        # Arrange
        config = RuleConfig(
            selected_digits=(4,),
            blocks={"simple": BlockSettings(digits=(0, 2, 3))},
        )

        # Act & Assert
        assert config.filler_digits == (2, 3)

    def test_allows_sign_when_only_addition_then_rejects_negative(self):
        config = RuleConfig(selected_digits=(1,), only_addition=True)

        assert config.allows_sign(3) is True
        assert config.allows_sign(-3) is False

    def test_allows_sign_when_only_subtraction_then_rejects_positive(self):
        config = RuleConfig(selected_digits=(1,), only_subtraction=True)

        assert config.allows_sign(-3) is True
        assert config.allows_sign(3) is False

    def test_blocks_when_config_built_then_read_only_and_hashable(self):
        # Arrange
        source = {"simple": BlockSettings(digits=(1, 2))}
        config = RuleConfig(selected_digits=(4,), blocks=source)

        # Act
        source["brothers"] = BlockSettings(digits=(4,))

        # Assert
        assert "brothers" not in config.blocks
        with pytest.raises(TypeError):
            config.blocks["simple"] = BlockSettings(digits=(3,))  # type: ignore[index]
        assert hash(config) == hash(RuleConfig(selected_digits=(4,), blocks=dict(source)))
        assert config == RuleConfig(selected_digits=(4,), blocks={"simple": BlockSettings(digits=(1, 2))})
