"""
Module: rules.simple

Purpose:
    The "simple" technique: direct counting on one column. Every offered
    action can be set by moving beads in a single direction.

Modes:
    - four-bead: digits 1-4 only, state in [0, 4], upper bead unused
    - five-bead: any selected digit >= 5 (or include_five), state in [0, 9],
      compositions such as 6 = 5 + 1 use the upper bead

Key Classes:
    - SimpleRule

Used By:
    - generator.selector: default rule when no technique block is active
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from abacus_toolkit.core.errors import ConfigInvalidError
from abacus_toolkit.core.models import Example, MicroStep

from .base import RuleKind, RuleSupport
from .beads import LOWER_BEADS, COLUMN_MAX, is_direct_move
from .config import RuleConfig

logger = logging.getLogger(__name__)


class SimpleRule:
    """
    Direct counting on a single column.

    Attributes:
        kind: RuleKind.SIMPLE
        config: Rule configuration
        rng: Pseudo-random source
        include_five: Five-bead mode (upper bead in use)

    Example:
        >>> rule = SimpleRule(RuleConfig(selected_digits=(1, 2, 3, 4)), random.Random(1))
        >>> rule.max_state
        4
        >>> rule.get_available_actions(3, is_first=False)
        [1, -1, -2, -3]
    """

    kind = RuleKind.SIMPLE

    def __init__(self, config: RuleConfig, rng: Optional[random.Random] = None) -> None:
        bad = [d for d in config.selected_digits if not 1 <= d <= 9]
        if bad:
            raise ConfigInvalidError(f"Simple digits must be in [1, 9]: {bad}")

        self.config = config
        self.rng = rng if rng is not None else random.Random()
        self.include_five = config.include_five or any(d >= 5 for d in config.selected_digits)
        self._support = RuleSupport(
            config, self.rng, max_state=self.max_state, name="SimpleRule"
        )
        logger.debug(
            f"SimpleRule: digits={list(config.selected_digits)}, include_five={self.include_five}, "
            f"max_state={self.max_state}, only_add={config.only_addition}, "
            f"only_sub={config.only_subtraction}"
        )

    @property
    def max_state(self) -> int:
        return COLUMN_MAX if self.include_five else LOWER_BEADS

    @property
    def column_width(self) -> int:
        return 1

    @property
    def requires_signature(self) -> bool:
        return False

    @property
    def signature_weight(self) -> int:
        return 0

    def generate_start_state(self) -> int:
        return self._support.generate_start_state()

    def generate_steps_count(self) -> int:
        return self._support.generate_steps_count()

    def apply_action(self, state: int, action: int) -> int:
        return self._support.apply_action(state, action)

    def is_physically_possible(self, state: int, action: int) -> bool:
        """True if ``action`` is a direct move from ``state`` within this rule's range."""
        return is_direct_move(state, action, self.max_state)

    def is_legal_move(self, state: int, action: int) -> bool:
        return self.is_physically_possible(state, action)

    def is_signature_transition(self, from_state: int, to_state: int) -> bool:
        return False

    def get_available_actions(self, state: int, is_first: bool) -> List[int]:
        """
        Legal direct actions from ``state``.

        Only additions are offered on the first step or from 0.
        """
        return self._support.collect_actions(
            state,
            is_first,
            filler_digits=self.config.selected_digits,
            filler_check=self.is_physically_possible,
        )

    def decompose_action(self, state: int, action: int) -> List[MicroStep]:
        return self._support.direct_decomposition(action)

    def validate_example(self, example: Example, *, require_signature: bool = True) -> bool:
        """
        Check bounds, flags, the answer and the physical possibility of every step.

        ``require_signature`` is accepted for interface compatibility; the
        simple technique has no signature transitions.
        """
        return self._support.validate(example, step_check=self.is_physically_possible)
