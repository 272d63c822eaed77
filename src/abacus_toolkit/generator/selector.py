"""
Module: generator.selector

Purpose:
    Map worksheet settings onto a concrete rule. The most advanced active
    block wins (mix > friends > brothers > simple); multi-digit worksheets
    wrap the rule in a MultiDigitComposer.

Key Functions:
    - active_kind(): Technique chosen for a set of blocks
    - build_rule_config(): RuleConfig for the chosen block
    - select_rule(): Rule or MultiDigitComposer for a WorksheetConfig

Used By:
    - generator.controller: build_worksheet
"""

from __future__ import annotations

import logging
import random
from typing import Mapping, Optional, Union

from abacus_toolkit.core.errors import ConfigInvalidError
from abacus_toolkit.rules import BlockSettings, Rule, RuleConfig, RuleKind, create_rule

from .config import WorksheetConfig
from .multi_digit import MultiDigitComposer

logger = logging.getLogger(__name__)

SELECTION_PRIORITY = (RuleKind.MIX, RuleKind.FRIENDS, RuleKind.BROTHERS, RuleKind.SIMPLE)


def active_kind(blocks: Mapping[str, BlockSettings]) -> RuleKind:
    """
    Pick the technique for a set of blocks.

    Raises:
        ConfigInvalidError: If no block has digits selected
    """
    for kind in SELECTION_PRIORITY:
        block = blocks.get(kind.value)
        if block is not None and block.is_active:
            return kind
    raise ConfigInvalidError("At least one block must have digits selected")


def build_rule_config(config: WorksheetConfig, kind: RuleKind) -> RuleConfig:
    """
    RuleConfig for the chosen block.

    The block's non-zero digits become the technique digits and its flags
    become the rule's flags. Simple switches to five-bead mode when any of
    its digits is 5 or more.
    """
    block = config.blocks[kind.value]
    low, high = config.step_range
    digits = tuple(d for d in block.digits if d != 0)
    return RuleConfig(
        selected_digits=digits,
        min_steps=low,
        max_steps=high,
        only_addition=block.only_addition,
        only_subtraction=block.only_subtraction,
        digit_count=config.digit_count,
        combine_levels=config.combine_levels,
        blocks=config.blocks,
        include_five=kind is RuleKind.SIMPLE and any(d >= 5 for d in digits),
    )


def select_rule(
    config: WorksheetConfig,
    rng: Optional[random.Random] = None,
) -> Union[Rule, MultiDigitComposer]:
    """
    Build the generator input for a worksheet.

    Args:
        config: Worksheet configuration
        rng: Pseudo-random source shared by the rule and the composer

    Returns:
        The rule, or the rule wrapped in a MultiDigitComposer when
        digit_count > 1

    Raises:
        ConfigInvalidError: If the chosen block's digits do not fit its technique

    Example:
        >>> config = WorksheetConfig(blocks={"brothers": BlockSettings(digits=(4,))})
        >>> select_rule(config, random.Random(0)).kind
        <RuleKind.BROTHERS: 'brothers'>
    """
    rng = rng if rng is not None else random.Random(config.seed)
    kind = active_kind(config.blocks)
    rule = create_rule(kind, build_rule_config(config, kind), rng)
    logger.info(f"Selected {kind.value} rule (digit_count={config.digit_count})")

    if config.digit_count == 1:
        return rule
    return MultiDigitComposer(
        rule,
        config.digit_count,
        rng,
        variable_digit_counts=config.combine_levels,
        digit_pool=config.blocks[kind.value].digits,
        max_attempts=config.max_attempts_per_example,
    )
