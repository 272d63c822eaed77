"""
Module: rules.mix

Purpose:
    The "mix" technique (brothers and friends combined): a friend move on
    the tens column whose units correction itself needs the upper bead.

Formulas:
    +N = +10 - F,  and -F = -5 + (5 - F)   ->  +10, -5, +(5 - F)
    -N = -10 + F,  and +F = +5 - (5 - F)   ->  -10, +5, -(5 - F)
    where F = 10 - N is the friend of N (N in 6-9, so F in 1-4).

Key Classes:
    - MixRule

Transition table:
    A transition is a mix transition iff it satisfies the friends
    tens-boundary condition and the units correction by F crosses the
    5-boundary: adding needs units >= 5 and units - F < 5; subtracting
    needs units < 5 and units + F >= 5.

Used By:
    - generator.selector: rule for an active "mix" block (highest priority)
"""

from __future__ import annotations

import logging
import random
from typing import FrozenSet, List, Optional, Tuple

from abacus_toolkit.core.errors import ConfigInvalidError
from abacus_toolkit.core.models import Example, MicroStep

from .base import RuleKind, RuleSupport, weight_from_priority
from .beads import UPPER_VALUE
from .config import RuleConfig
from .friends import MIN_DIGIT_COUNT, TWO_COLUMN_MAX, crosses_ten, friend_of

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 0.6


def needs_brother_correction(from_state: int, action: int) -> bool:
    """
    Check whether the units correction of a friend move crosses 5.

    Args:
        from_state: State in [0, 99]
        action: Signed delta with magnitude 6-9

    Returns:
        True if removing (adding) the friend on the units column needs
        the upper bead
    """
    units = from_state % 10
    friend = friend_of(abs(action))
    if action > 0:
        return units >= UPPER_VALUE and units - friend < UPPER_VALUE
    if action < 0:
        return units < UPPER_VALUE and units + friend >= UPPER_VALUE
    return False


def build_mix_transitions(digits: Tuple[int, ...]) -> FrozenSet[Tuple[int, int]]:
    """
    Enumerate every (from, to) two-column transition that needs a friend
    and a brother.

    Args:
        digits: Mix digits in [6, 9]

    Returns:
        Frozen set of (from_state, to_state) pairs
    """
    pairs = set()
    for n in digits:
        for v in range(TWO_COLUMN_MAX + 1):
            for action in (n, -n):
                target = v + action
                if not 0 <= target <= TWO_COLUMN_MAX:
                    continue
                if crosses_ten(v, action) and needs_brother_correction(v, action):
                    pairs.add((v, target))
    return frozenset(pairs)


class MixRule:
    """
    Friend-plus-brother compensation over two columns (state 0-99).

    Attributes:
        kind: RuleKind.MIX
        config: Rule configuration; digit_count must be at least 2
        rng: Pseudo-random source
        transitions: Precomputed mix transitions

    Example:
        >>> rule = MixRule(RuleConfig(selected_digits=(7,), digit_count=2))
        >>> rule.decompose_action(7, 7)
        [MicroStep(action=10, kind='ten'), MicroStep(action=-5, kind='five'), MicroStep(action=2, kind='units')]
    """

    kind = RuleKind.MIX

    def __init__(self, config: RuleConfig, rng: Optional[random.Random] = None) -> None:
        bad = [d for d in config.selected_digits if not 6 <= d <= 9]
        if bad:
            raise ConfigInvalidError(f"Mix digits must be in [6, 9]: {bad}")
        if config.digit_count < MIN_DIGIT_COUNT:
            raise ConfigInvalidError(
                f"Mix requires digit_count >= {MIN_DIGIT_COUNT}: {config.digit_count}"
            )

        self.config = config
        self.rng = rng if rng is not None else random.Random()
        priority = config.signature_priority if config.signature_priority is not None else DEFAULT_PRIORITY
        self._weight = weight_from_priority(priority)
        self._support = RuleSupport(config, self.rng, max_state=TWO_COLUMN_MAX, name="MixRule")
        self.transitions = build_mix_transitions(config.selected_digits)

        logger.debug(
            f"MixRule: mix={list(config.selected_digits)}, "
            f"fillers={list(config.filler_digits)}, {len(self.transitions)} transitions"
        )

    @property
    def max_state(self) -> int:
        return TWO_COLUMN_MAX

    @property
    def column_width(self) -> int:
        return 2

    @property
    def requires_signature(self) -> bool:
        return True

    @property
    def signature_weight(self) -> int:
        return self._weight

    def generate_start_state(self) -> int:
        return self._support.generate_start_state()

    def generate_steps_count(self) -> int:
        return self._support.generate_steps_count()

    def apply_action(self, state: int, action: int) -> int:
        return self._support.apply_action(state, action)

    def is_signature_transition(self, from_state: int, to_state: int) -> bool:
        return (from_state, to_state) in self.transitions

    def is_legal_move(self, state: int, action: int) -> bool:
        """Plain steps only need to stay within 0-99."""
        return self._support.in_bounds(state + action)

    def get_available_actions(self, state: int, is_first: bool) -> List[int]:
        return self._support.collect_actions(
            state,
            is_first,
            filler_digits=self.config.filler_digits,
            technique_digits=self.config.selected_digits,
            is_signature=self.is_signature_transition,
            weight=self._weight,
        )

    def decompose_action(self, state: int, action: int) -> List[MicroStep]:
        """Break a mix action into the tens bead, the upper bead and the lower-bead correction."""
        if not self.is_signature_transition(state, state + action):
            return self._support.direct_decomposition(action)
        rest = UPPER_VALUE - friend_of(abs(action))
        if action > 0:
            return [MicroStep(10, "ten"), MicroStep(-UPPER_VALUE, "five"), MicroStep(rest, "units")]
        return [MicroStep(-10, "ten"), MicroStep(UPPER_VALUE, "five"), MicroStep(-rest, "units")]

    def validate_example(self, example: Example, *, require_signature: bool = True) -> bool:
        return self._support.validate(
            example,
            is_signature=self.is_signature_transition if require_signature else None,
        )
