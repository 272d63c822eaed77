"""
Module: rules.brothers

Purpose:
    The "brothers" technique: compensation through the upper bead using
    digit pairs that sum to 5 (1-4, 2-3).

Formulas:
    +N = +5 - (5 - N)    used when the column crosses 5 going up
    -N = -5 + (5 - N)    used when the column crosses 5 going down

Key Classes:
    - BrothersRule

Transition table:
    Built once per rule from the selected digits by enumerating every
    column state 0-9. A transition is a brother transition iff the column
    crosses the 5-boundary: from < 5 <= to when adding, to < 5 <= from
    when subtracting. Those are exactly the moves whose +5/-5 followed by
    the brother's lower-bead correction is physically available.

Used By:
    - generator.selector: rule for an active "brothers" block
"""

from __future__ import annotations

import logging
import random
from typing import FrozenSet, List, Optional, Tuple

from abacus_toolkit.core.errors import ConfigInvalidError
from abacus_toolkit.core.models import Example, MicroStep

from .base import RuleKind, RuleSupport, weight_from_priority
from .beads import UPPER_VALUE, COLUMN_MAX, is_direct_move
from .config import RuleConfig

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 0.5


def brother_of(digit: int) -> int:
    """Complement of ``digit`` to 5."""
    return UPPER_VALUE - digit


def build_brother_transitions(digits: Tuple[int, ...]) -> FrozenSet[Tuple[int, int]]:
    """
    Enumerate every (from, to) column transition that needs a brother.

    Args:
        digits: Brother digits in [1, 4]

    Returns:
        Frozen set of (from_state, to_state) pairs
    """
    pairs = set()
    for n in digits:
        for v in range(COLUMN_MAX + 1):
            up = v + n
            if up <= COLUMN_MAX and v < UPPER_VALUE <= up:
                pairs.add((v, up))
            down = v - n
            if down >= 0 and down < UPPER_VALUE <= v:
                pairs.add((v, down))
    return frozenset(pairs)


class BrothersRule:
    """
    Brother-pair compensation on a single column (state 0-9).

    Plain filler steps come from the "simple" block digits and must be
    direct moves; brother actions are repeated ``signature_weight`` times
    in the offered multiset.

    Attributes:
        kind: RuleKind.BROTHERS
        config: Rule configuration
        rng: Pseudo-random source
        transitions: Precomputed brother transitions
    """

    kind = RuleKind.BROTHERS

    def __init__(self, config: RuleConfig, rng: Optional[random.Random] = None) -> None:
        bad = [d for d in config.selected_digits if not 1 <= d <= 4]
        if bad:
            raise ConfigInvalidError(f"Brothers digits must be in [1, 4]: {bad}")

        self.config = config
        self.rng = rng if rng is not None else random.Random()
        priority = config.signature_priority if config.signature_priority is not None else DEFAULT_PRIORITY
        self._weight = weight_from_priority(priority)
        self._support = RuleSupport(config, self.rng, max_state=COLUMN_MAX, name="BrothersRule")
        self.transitions = build_brother_transitions(config.selected_digits)

        logger.debug(
            f"BrothersRule: brothers={list(config.selected_digits)}, "
            f"fillers={list(config.filler_digits)}, {len(self.transitions)} transitions"
        )

    @property
    def max_state(self) -> int:
        return COLUMN_MAX

    @property
    def column_width(self) -> int:
        return 1

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
        """Plain steps must be direct bead moves within 0-9."""
        return is_direct_move(state, action, COLUMN_MAX)

    def _is_step_possible(self, state: int, action: int) -> bool:
        return self.is_signature_transition(state, state + action) or self.is_legal_move(state, action)

    def get_available_actions(self, state: int, is_first: bool) -> List[int]:
        return self._support.collect_actions(
            state,
            is_first,
            filler_digits=self.config.filler_digits,
            technique_digits=self.config.selected_digits,
            is_signature=self.is_signature_transition,
            weight=self._weight,
            filler_check=self.is_legal_move,
        )

    def decompose_action(self, state: int, action: int) -> List[MicroStep]:
        """
        Break a brother action into its upper-bead and lower-bead movements.

        Example:
            >>> rule.decompose_action(3, 4)
            [MicroStep(action=5, kind='five'), MicroStep(action=-1, kind='units')]
        """
        if not self.is_signature_transition(state, state + action):
            return self._support.direct_decomposition(action)
        brother = brother_of(abs(action))
        if action > 0:
            return [MicroStep(UPPER_VALUE, "five"), MicroStep(-brother, "units")]
        return [MicroStep(-UPPER_VALUE, "five"), MicroStep(brother, "units")]

    def validate_example(self, example: Example, *, require_signature: bool = True) -> bool:
        return self._support.validate(
            example,
            is_signature=self.is_signature_transition if require_signature else None,
            step_check=self._is_step_possible,
        )
