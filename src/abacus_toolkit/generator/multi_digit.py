"""
Module: generator.multi_digit

Purpose:
    Whole-number actions (+21, -342) built on top of a technique rule.
    The composer picks the digits and the sign of each action; legality,
    flags and the signature requirement still come from the wrapped rule.

Key Classes:
    - MultiDigitComposer: Generates and validates multi-digit examples

Algorithm (per step):
    1. Action length: display_digit_count, or uniform in [1, display]
       when variable_digit_counts is set
    2. Digits left to right from the pool: no leading zero, at most
       max_zero_digits zeros per exercise, repeats only by chance
    3. Sign: positive on the first step or from 0, else per the only_*
       flags, else random
    4. No action if the running total would leave [0, 10 ** device)
    5. Redraw (up to max_action_tries) while a column move is neither a
       signature transition nor a legal plain move of the wrapped rule

Dependencies:
    - abacus_toolkit.rules: Rule protocol, RuleSupport
    - generator.budget: attempt budget and fallback

Used By:
    - generator.sequence: SequenceGenerator delegates to it
    - generator.selector: wraps the chosen rule when digit_count > 1
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Iterator, List, Optional, Sequence, Tuple

from abacus_toolkit.core.errors import (
    ActionUnavailableError,
    AttemptsExhaustedError,
    ConfigInvalidError,
    GenerationError,
    ValidationFailureError,
)
from abacus_toolkit.core.models import Example, Step
from abacus_toolkit.rules import Rule, RuleConfig, RuleKind, RuleSupport
from abacus_toolkit.rules.config import MAX_DIGIT_COUNT

from .budget import FALLBACK_EXAMPLE, GenerationResult, attempt_budget

logger = logging.getLogger(__name__)

DEFAULT_DUPLICATE_PROBABILITY = 0.1
DEFAULT_MAX_ZERO_DIGITS = 1
DEFAULT_MAX_DIGIT_TRIES = 50
DEFAULT_MAX_ACTION_TRIES = 20


@dataclass
class _DigitBudget:
    """Zero and duplicate digits used so far in one attempt."""

    zeros_used: int = 0
    duplicates_used: int = 0


class MultiDigitComposer:
    """
    Multi-digit exercise generator wrapping a technique rule.

    The device has one more column than the numbers shown to the learner,
    so a carry out of the top displayed column still fits.

    Attributes:
        rule: Wrapped technique rule
        display_digit_count: Length of the numbers shown (1-9)
        rng: Pseudo-random source; defaults to the rule's
        variable_digit_counts: Draw each action's length from [1, display]
        duplicate_probability: Chance to accept a repeated digit
        max_zero_digits: Zero digits allowed per exercise
        max_digit_tries: Samples per digit position before falling back
        max_action_tries: Draws per step before the attempt is abandoned
        digit_pool: Digits to draw from; defaults to the rule's digits
        max_attempts: Attempt budget override

    Example:
        >>> rule = BrothersRule(RuleConfig(selected_digits=(4,), digit_count=2), rng)
        >>> composer = MultiDigitComposer(rule, 2, rng)
        >>> composer.device_digit_count
        3
    """

    def __init__(
        self,
        rule: Rule,
        display_digit_count: int,
        rng: Optional[random.Random] = None,
        *,
        variable_digit_counts: bool = False,
        duplicate_probability: float = DEFAULT_DUPLICATE_PROBABILITY,
        max_zero_digits: int = DEFAULT_MAX_ZERO_DIGITS,
        max_digit_tries: int = DEFAULT_MAX_DIGIT_TRIES,
        max_action_tries: int = DEFAULT_MAX_ACTION_TRIES,
        digit_pool: Optional[Sequence[int]] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        if not 1 <= display_digit_count <= MAX_DIGIT_COUNT:
            raise ConfigInvalidError(
                f"display_digit_count must be in [1, {MAX_DIGIT_COUNT}]: {display_digit_count}"
            )
        if not 0.0 <= duplicate_probability <= 1.0:
            raise ConfigInvalidError(f"duplicate_probability must be in [0, 1]: {duplicate_probability}")
        if max_zero_digits < 0:
            raise ConfigInvalidError(f"max_zero_digits must be >= 0: {max_zero_digits}")
        if max_digit_tries < 1:
            raise ConfigInvalidError(f"max_digit_tries must be positive: {max_digit_tries}")
        if max_action_tries < 1:
            raise ConfigInvalidError(f"max_action_tries must be positive: {max_action_tries}")

        pool = tuple(dict.fromkeys(digit_pool if digit_pool is not None else rule.config.selected_digits))
        bad = [d for d in pool if not 0 <= d <= 9]
        if bad:
            raise ConfigInvalidError(f"Digit pool must be in [0, 9]: {bad}")
        if not any(d != 0 for d in pool):
            raise ConfigInvalidError(f"Digit pool needs a non-zero digit: {list(pool)}")

        self.rule = rule
        self.display_digit_count = display_digit_count
        self.rng = rng if rng is not None else rule.rng
        self.variable_digit_counts = variable_digit_counts
        self.duplicate_probability = duplicate_probability
        self.max_zero_digits = max_zero_digits
        self.max_digit_tries = max_digit_tries
        self.max_action_tries = max_action_tries
        self.digit_pool: Tuple[int, ...] = pool
        self.max_attempts = max_attempts
        self._support = RuleSupport(
            rule.config, self.rng, max_state=self.upper_bound - 1, name="MultiDigitComposer"
        )

        logger.debug(
            f"MultiDigitComposer: {rule.kind.value}, display={display_digit_count}, "
            f"device={self.device_digit_count}, pool={list(pool)}, "
            f"variable={variable_digit_counts}"
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def config(self) -> RuleConfig:
        return self.rule.config

    @property
    def kind(self) -> RuleKind:
        return self.rule.kind

    @property
    def device_digit_count(self) -> int:
        """Columns on the device: one more than displayed."""
        return self.display_digit_count + 1

    @property
    def upper_bound(self) -> int:
        """Exclusive upper bound of the running total."""
        return 10 ** self.device_digit_count

    @property
    def attempt_limit(self) -> int:
        if self.max_attempts is not None:
            return self.max_attempts
        return attempt_budget(self.display_digit_count, self.rule.config.combine_levels)

    # ─────────────────────────────────────────────────────────────────────────
    # Generation
    # ─────────────────────────────────────────────────────────────────────────

    def generate_example(self) -> Example:
        """Generate one validated example, or the fallback."""
        return self.generate_result().example

    def generate_result(self) -> GenerationResult:
        """
        Run the attempt loop.

        Returns:
            GenerationResult; used_fallback is True when the budget ran out
        """
        try:
            return self._run_attempts(self.attempt_limit)
        except AttemptsExhaustedError as e:
            logger.warning(f"MultiDigitComposer ({self.rule.kind.value}): {e}; using fallback example")
            return GenerationResult(example=FALLBACK_EXAMPLE, attempts=e.attempts, used_fallback=True)

    def _run_attempts(self, limit: int) -> GenerationResult:
        for attempt in range(1, limit + 1):
            try:
                example = self._attempt()
                if not self.validate_example(example):
                    raise ValidationFailureError("multi-digit example rejected")
            except GenerationError as e:
                logger.debug(f"Attempt {attempt}/{limit} failed: {e}")
                continue
            logger.debug(f"Multi-digit example accepted after {attempt} attempts")
            return GenerationResult(example=example, attempts=attempt)
        raise AttemptsExhaustedError(limit)

    def _attempt(self) -> Example:
        budget = _DigitBudget()
        count = self.rule.generate_steps_count()
        state = 0
        steps: List[Step] = []
        for index in range(count):
            action = self.draw_legal_action(state, index == 0, budget)
            if action is None:
                raise ActionUnavailableError(index, state)
            step = Step.apply(state, action)
            steps.append(step)
            state = step.to_state
        return Example(start=0, steps=tuple(steps), answer=state)

    def draw_legal_action(self, current_state: int, is_first: bool, budget: _DigitBudget) -> Optional[int]:
        """
        Draw actions until one stays on the device and is legal column by column.

        Rejected draws do not spend the attempt's zero or duplicate budget.

        Returns:
            Signed action, or None after max_action_tries rejected draws
        """
        for _ in range(self.max_action_tries):
            trial = replace(budget)
            action = self.generate_action(current_state, is_first, trial)
            if action is None or not self.is_legal_step(current_state, action):
                continue
            budget.zeros_used = trial.zeros_used
            budget.duplicates_used = trial.duplicates_used
            return action
        return None

    def generate_action(
        self,
        current_state: int,
        is_first: bool,
        budget: Optional[_DigitBudget] = None,
    ) -> Optional[int]:
        """
        Build one signed multi-digit action.

        Args:
            current_state: Running total before the action
            is_first: First step of the exercise
            budget: Zero/duplicate counters of the current attempt

        Returns:
            Signed action, or None if it would leave [0, upper_bound)
        """
        budget = budget if budget is not None else _DigitBudget()
        length = self.choose_length()
        magnitude = self.compose_number(self.select_digits(length, budget))
        action = self.choose_sign(current_state, is_first) * magnitude
        target = current_state + action
        if not 0 <= target < self.upper_bound:
            return None
        return action

    def choose_length(self) -> int:
        if self.variable_digit_counts:
            return self.rng.randint(1, self.display_digit_count)
        return self.display_digit_count

    def select_digits(self, length: int, budget: _DigitBudget) -> List[int]:
        """
        Pick ``length`` digits left to right.

        Each position is sampled up to max_digit_tries times. A zero is
        rejected at position 0 or once the exercise's zero budget is spent;
        a digit already in this number is accepted only with
        duplicate_probability. Running out of tries takes the first
        admissible pool digit.
        """
        digits: List[int] = []
        for position in range(length):
            chosen = None
            for _ in range(self.max_digit_tries):
                candidate = self.rng.choice(self.digit_pool)
                if not self._is_admissible(candidate, position, budget):
                    continue
                if candidate in digits and self.rng.random() >= self.duplicate_probability:
                    continue
                chosen = candidate
                break
            if chosen is None:
                chosen = self._fallback_digit(position, budget)

            if chosen in digits:
                budget.duplicates_used += 1
            if chosen == 0:
                budget.zeros_used += 1
            digits.append(chosen)
        return digits

    def _is_admissible(self, digit: int, position: int, budget: _DigitBudget) -> bool:
        if digit != 0:
            return True
        return position > 0 and budget.zeros_used < self.max_zero_digits

    def _fallback_digit(self, position: int, budget: _DigitBudget) -> int:
        for digit in self.digit_pool:
            if self._is_admissible(digit, position, budget):
                return digit
        return self.digit_pool[0]

    @staticmethod
    def compose_number(digits: Sequence[int]) -> int:
        """
        Positional base-10 value of ``digits``.

        Example:
            >>> MultiDigitComposer.compose_number([3, 0, 7])
            307
        """
        value = 0
        for digit in digits:
            value = value * 10 + digit
        return value

    def choose_sign(self, current_state: int, is_first: bool) -> int:
        if is_first or current_state == 0:
            return 1
        if self.config.only_addition:
            return 1
        if self.config.only_subtraction:
            return -1
        return 1 if self.rng.random() < 0.5 else -1

    # ─────────────────────────────────────────────────────────────────────────
    # Validation
    # ─────────────────────────────────────────────────────────────────────────

    def column_moves(self, state: int, action: int) -> Iterator[Tuple[int, int]]:
        """
        Yield (window, column_action) for each column ``action`` touches.

        The action is set column by column from the units up. The window is
        the rule's view of the running state at that column: one digit for
        single-column rules, two digits for Friends and Mix.

        Example:
            >>> list(composer.column_moves(13, 21))
            [(3, 1), (1, 2)]
        """
        sign = 1 if action > 0 else -1
        window_mod = 10 ** self.rule.column_width
        remaining = abs(action)
        scale = 1
        while remaining:
            digit = remaining % 10
            if digit:
                yield (state // scale) % window_mod, sign * digit
                state += sign * digit * scale
            remaining //= 10
            scale *= 10

    def is_signature_step(self, from_state: int, to_state: int) -> bool:
        """True if any column move is a signature transition of the wrapped rule."""
        return any(
            self.rule.is_signature_transition(window, window + move)
            for window, move in self.column_moves(from_state, to_state - from_state)
        )

    def is_legal_step(self, state: int, action: int) -> bool:
        """
        True if every column move can be made on the device.

        A column move must be a signature transition or pass the wrapped
        rule's own plain-move check (direct beads for Simple and Brothers,
        range only for Friends and Mix).
        """
        for window, move in self.column_moves(state, action):
            if self.rule.is_signature_transition(window, window + move):
                continue
            if not self.rule.is_legal_move(window, move):
                return False
        return True

    def validate_example(self, example: Example) -> bool:
        """
        Check the answer, device bounds, only_* flags, the legality of every
        column move and, for signature techniques, at least one signature
        column move.
        """
        return self._support.validate(
            example,
            is_signature=self.is_signature_step if self.rule.requires_signature else None,
            step_check=self.is_legal_step,
        )
