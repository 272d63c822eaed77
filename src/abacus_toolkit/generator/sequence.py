"""
Module: generator.sequence

Purpose:
    Bounded generate-and-test loop producing one validated example from a
    technique rule. Generation never raises for a valid configuration: an
    exhausted attempt budget yields the fixed fallback example.

Key Classes:
    - SequenceGenerator: Attempt loop over a Rule (or MultiDigitComposer)

Modes:
    - single: one state, actions sampled from rule.get_available_actions()
    - lock-step: digit_count columns, one action applied to every column
      (combine_levels=True)
    - independent: each column sampled on its own every step
      (combine_levels=False)
    Vector modes apply to single-column rules with digit_count > 1. Column
    0 is the most significant. Recorded actions are net deltas of the
    composite number.

Dependencies:
    - abacus_toolkit.rules: Rule protocol
    - generator.multi_digit: MultiDigitComposer delegation
    - generator.budget: attempt budget and fallback

Used By:
    - generator.controller: build_worksheet
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from abacus_toolkit.core.errors import (
    ActionUnavailableError,
    AttemptsExhaustedError,
    ConfigInvalidError,
    GenerationError,
    ValidationFailureError,
)
from abacus_toolkit.core.models import Example, Step
from abacus_toolkit.rules import Rule

from .budget import FALLBACK_EXAMPLE, GenerationResult, attempt_budget
from .multi_digit import MultiDigitComposer

logger = logging.getLogger(__name__)


def compose_columns(columns: Sequence[int]) -> int:
    """
    Composite value of per-column digits, most significant first.

    Example:
        >>> compose_columns([1, 0, 4])
        104
    """
    value = 0
    for digit in columns:
        value = value * 10 + digit
    return value


@dataclass(frozen=True)
class _Draft:
    """One assembled attempt: the example plus per-column action histories."""

    example: Example
    column_actions: Optional[Tuple[Tuple[int, ...], ...]] = None

    def truncated(self, max_steps: int) -> _Draft:
        columns = None
        if self.column_actions is not None:
            columns = tuple(actions[:max_steps] for actions in self.column_actions)
        return _Draft(example=self.example.truncated(max_steps), column_actions=columns)


@dataclass
class SequenceGenerator:
    """
    Exercise generator with bounded retries.

    Attributes:
        rule: Technique rule, or a MultiDigitComposer to delegate to
        rng: Pseudo-random source; defaults to the rule's
        max_steps: Truncation length; defaults to rule.config.max_steps
        max_attempts: Attempt budget override

    Example:
        >>> rule = SimpleRule(RuleConfig(selected_digits=(1, 2, 3, 4)), random.Random(7))
        >>> example = SequenceGenerator(rule).generate()
        >>> example.answer == example.start + sum(example.actions)
        True
    """

    rule: Union[Rule, MultiDigitComposer]
    rng: Optional[random.Random] = None
    max_steps: Optional[int] = None
    max_attempts: Optional[int] = None

    _rng: random.Random = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._rng = self.rng if self.rng is not None else self.rule.rng
        if self.max_steps is not None and self.max_steps < 1:
            raise ConfigInvalidError(f"max_steps must be positive: {self.max_steps}")

    # ─────────────────────────────────────────────────────────────────────────
    # Mode
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def is_composer(self) -> bool:
        return isinstance(self.rule, MultiDigitComposer)

    @property
    def column_count(self) -> int:
        """Independent device columns driven by this generator."""
        if self.is_composer or self.rule.column_width != 1:
            return 1
        return self.rule.config.digit_count

    @property
    def is_vector(self) -> bool:
        return self.column_count > 1

    @property
    def is_lock_step(self) -> bool:
        return self.is_vector and self.rule.config.combine_levels

    @property
    def attempt_limit(self) -> int:
        if self.max_attempts is not None:
            return self.max_attempts
        return attempt_budget(self.column_count, self.rule.config.combine_levels)

    @property
    def step_limit(self) -> int:
        return self.max_steps if self.max_steps is not None else self.rule.config.max_steps

    # ─────────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────────

    def generate(self) -> Example:
        """
        Produce one example.

        Returns:
            A validated example, or FALLBACK_EXAMPLE if the budget ran out
        """
        return self.generate_result().example

    def generate_result(self) -> GenerationResult:
        """Produce one example and report how it was obtained."""
        if self.is_composer:
            return self.rule.generate_result()

        try:
            return self._run_attempts(self.attempt_limit)
        except AttemptsExhaustedError as e:
            logger.warning(f"SequenceGenerator ({self.rule.kind.value}): {e}; using fallback example")
            return GenerationResult(example=FALLBACK_EXAMPLE, attempts=e.attempts, used_fallback=True)

    # ─────────────────────────────────────────────────────────────────────────
    # Attempt Loop
    # ─────────────────────────────────────────────────────────────────────────

    def _run_attempts(self, limit: int) -> GenerationResult:
        for attempt in range(1, limit + 1):
            try:
                draft = self._assemble().truncated(self.step_limit)
                self._check(draft)
            except GenerationError as e:
                logger.debug(f"Attempt {attempt}/{limit} failed: {e}")
                continue
            logger.debug(f"Example accepted after {attempt} attempts")
            return GenerationResult(example=draft.example, attempts=attempt)
        raise AttemptsExhaustedError(limit)

    def _assemble(self) -> _Draft:
        if self.is_lock_step:
            return self._assemble_lock_step()
        if self.is_vector:
            return self._assemble_independent()
        return self._assemble_single()

    def _assemble_single(self) -> _Draft:
        rule = self.rule
        state = rule.generate_start_state()
        start = state
        count = rule.generate_steps_count()
        steps: List[Step] = []
        for index in range(count):
            available = rule.get_available_actions(state, index == 0)
            if not available:
                raise ActionUnavailableError(index, state)
            action = self._rng.choice(available)
            target = rule.apply_action(state, action)
            steps.append(Step(action=action, from_state=state, to_state=target))
            state = target
        return _Draft(example=Example(start=start, steps=tuple(steps), answer=state))

    def _assemble_lock_step(self) -> _Draft:
        rule = self.rule
        columns = [rule.generate_start_state()] * self.column_count
        start = compose_columns(columns)
        count = rule.generate_steps_count()
        history: List[List[int]] = [[] for _ in columns]
        steps: List[Step] = []
        for index in range(count):
            available = rule.get_available_actions(columns[0], index == 0)
            if not available:
                raise ActionUnavailableError(index, tuple(columns))
            action = self._rng.choice(available)
            before = compose_columns(columns)
            columns = [rule.apply_action(digit, action) for digit in columns]
            for actions in history:
                actions.append(action)
            steps.append(Step.apply(before, compose_columns(columns) - before))
        return _Draft(
            example=Example(start=start, steps=tuple(steps), answer=compose_columns(columns)),
            column_actions=tuple(tuple(actions) for actions in history),
        )

    def _assemble_independent(self) -> _Draft:
        rule = self.rule
        columns = [rule.generate_start_state()] * self.column_count
        start = compose_columns(columns)
        count = rule.generate_steps_count()
        history: List[List[int]] = [[] for _ in columns]
        steps: List[Step] = []
        for index in range(count):
            before = compose_columns(columns)
            for position, digit in enumerate(columns):
                available = rule.get_available_actions(digit, index == 0)
                action = self._rng.choice(available) if available else 0
                columns[position] = rule.apply_action(digit, action)
                history[position].append(action)
            delta = compose_columns(columns) - before
            if delta == 0:
                raise ActionUnavailableError(index, tuple(columns))
            steps.append(Step.apply(before, delta))
        return _Draft(
            example=Example(start=start, steps=tuple(steps), answer=compose_columns(columns)),
            column_actions=tuple(tuple(actions) for actions in history),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Validation
    # ─────────────────────────────────────────────────────────────────────────

    def _check(self, draft: _Draft) -> None:
        """Raise ValidationFailureError if the draft breaks the rule."""
        example = draft.example
        if not example.is_consistent:
            raise ValidationFailureError("answer does not match the steps")

        if draft.column_actions is None:
            if not self.rule.validate_example(example):
                raise ValidationFailureError(f"{self.rule.kind.value} rejected the example")
            return

        start = self.rule.generate_start_state()
        column_examples = [Example.from_actions(start, actions) for actions in draft.column_actions]
        for position, column in enumerate(column_examples):
            if not self.rule.validate_example(column, require_signature=False):
                raise ValidationFailureError(f"column {position} rejected by {self.rule.kind.value}")

        if self.rule.requires_signature and not any(
            self.rule.is_signature_transition(step.from_state, step.to_state)
            for column in column_examples
            for step in column.steps
        ):
            raise ValidationFailureError("no signature transition in any column")
