"""
Module: rules

Purpose:
    Technique rules for abacus exercises. Each rule knows which actions
    are legal from a state, which transitions exercise its technique, how
    to break such an action into bead movements, and how to validate a
    finished example.

Key Classes:
    - RuleConfig, BlockSettings: Configuration
    - RuleKind: The closed set of techniques
    - Rule: Protocol every technique implements
    - SimpleRule, BrothersRule, FriendsRule, MixRule: The techniques

Key Functions:
    - create_rule(): Build the rule for a RuleKind

Used By:
    - generator.sequence: SequenceGenerator
    - generator.multi_digit: MultiDigitComposer
    - generator.selector: select_rule
"""

from __future__ import annotations

import random
from typing import Optional

from .config import BlockSettings, RuleConfig, BLOCK_NAMES
from .base import Rule, RuleKind, RuleSupport
from .beads import describe_state, is_direct_move
from .simple import SimpleRule
from .brothers import BrothersRule
from .friends import FriendsRule
from .mix import MixRule

_RULES = {
    RuleKind.SIMPLE: SimpleRule,
    RuleKind.BROTHERS: BrothersRule,
    RuleKind.FRIENDS: FriendsRule,
    RuleKind.MIX: MixRule,
}


def create_rule(kind: RuleKind, config: RuleConfig, rng: Optional[random.Random] = None) -> Rule:
    """
    Build the rule for ``kind``.

    Args:
        kind: Technique to build
        config: Rule configuration
        rng: Pseudo-random source; unseeded if None

    Returns:
        Rule instance

    Raises:
        ConfigInvalidError: If the config violates the technique's constraints
    """
    return _RULES[kind](config, rng)


__all__ = [
    "BlockSettings",
    "RuleConfig",
    "BLOCK_NAMES",
    "Rule",
    "RuleKind",
    "RuleSupport",
    "describe_state",
    "is_direct_move",
    "SimpleRule",
    "BrothersRule",
    "FriendsRule",
    "MixRule",
    "create_rule",
]
