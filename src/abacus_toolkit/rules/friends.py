"""
Module: rules.friends

Purpose:
    The "friends" technique: compensation through the tens column using
    digit pairs that sum to 10 (1-9, 2-8, 3-7, 4-6, 5-5).

Formulas:
    +N = +10 - (10 - N)    units overflow, tens take one bead
    -N = -10 + (10 - N)    units underflow, tens give one bead

Key Classes:
    - FriendsRule

Transition table:
    Built once per rule by enumerating every two-column state 0-99. Adding
    N is a friend transition iff units + N >= 10 and tens < 9; subtracting
    N iff units < N and tens > 0.

Used By:
    - generator.selector: rule for an active "friends" block
    - rules.mix: shares the boundary-crossing condition
"""

from __future__ import annotations

import logging
import random
from typing import FrozenSet, List, Optional, Tuple

from abacus_toolkit.core.errors import ConfigInvalidError
from abacus_toolkit.core.models import Example, MicroStep

from .base import RuleKind, RuleSupport, weight_from_priority
from .config import RuleConfig

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 0.5
TWO_COLUMN_MAX = 99
MIN_DIGIT_COUNT = 2


def friend_of(digit: int) -> int:
    """Complement of ``digit`` to 10."""
    return 10 - digit


def crosses_ten(from_state: int, action: int) -> bool:
    """
    Check the tens-boundary condition of a two-column move.

    Args:
        from_state: State in [0, 99]
        action: Signed delta with magnitude 1-9

    Returns:
        True if the units column must borrow from or carry into the tens column
    """
    units = from_state % 10
    tens = from_state // 10
    if action > 0:
        return units + action >= 10 and tens < 9
    if action < 0:
        return units < -action and tens > 0
    return False


def build_friend_transitions(digits: Tuple[int, ...]) -> FrozenSet[Tuple[int, int]]:
    """
    Enumerate every (from, to) two-column transition that needs a friend.

    Args:
        digits: Friend digits in [1, 9]

    Returns:
        Frozen set of (from_state, to_state) pairs
    """
    pairs = set()
    for n in digits:
        for v in range(TWO_COLUMN_MAX + 1):
            for action in (n, -n):
                target = v + action
                if 0 <= target <= TWO_COLUMN_MAX and crosses_ten(v, action):
                    pairs.add((v, target))
    return frozenset(pairs)


class FriendsRule:
    """
    Friend-pair compensation over two columns (state 0-99).

    Attributes:
        kind: RuleKind.FRIENDS
        config: Rule configuration; digit_count must be at least 2
        rng: Pseudo-random source
        transitions: Precomputed friend transitions

    Example:
        >>> rule = FriendsRule(RuleConfig(selected_digits=(9,), digit_count=2))
        >>> rule.is_signature_transition(13, 22)
        True
    """

    kind = RuleKind.FRIENDS

    def __init__(self, config: RuleConfig, rng: Optional[random.Random] = None) -> None:
        bad = [d for d in config.selected_digits if not 1 <= d <= 9]
        if bad:
            raise ConfigInvalidError(f"Friends digits must be in [1, 9]: {bad}")
        if config.digit_count < MIN_DIGIT_COUNT:
            raise ConfigInvalidError(
                f"Friends requires digit_count >= {MIN_DIGIT_COUNT}: {config.digit_count}"
            )

        self.config = config
        self.rng = rng if rng is not None else random.Random()
        priority = config.signature_priority if config.signature_priority is not None else DEFAULT_PRIORITY
        self._weight = weight_from_priority(priority)
        self._support = RuleSupport(config, self.rng, max_state=TWO_COLUMN_MAX, name="FriendsRule")
        self.transitions = build_friend_transitions(config.selected_digits)

        logger.debug(
            f"FriendsRule: friends={list(config.selected_digits)}, "
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
        """
        Break a friend action into the tens bead and the units correction.

        Example:
            >>> rule.decompose_action(13, 9)
            [MicroStep(action=10, kind='ten'), MicroStep(action=-1, kind='units')]
        """
        if not self.is_signature_transition(state, state + action):
            return self._support.direct_decomposition(action)
        friend = friend_of(abs(action))
        if action > 0:
            return [MicroStep(10, "ten"), MicroStep(-friend, "units")]
        return [MicroStep(-10, "ten"), MicroStep(friend, "units")]

    def validate_example(self, example: Example, *, require_signature: bool = True) -> bool:
        return self._support.validate(
            example,
            is_signature=self.is_signature_transition if require_signature else None,
        )
