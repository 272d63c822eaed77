"""
Module: example

Purpose:
    Provides the Step, Example and MicroStep dataclasses - the values a
    generator produces and a formatter consumes. An Example is built once,
    validated by its rule, optionally truncated into a new instance, and
    never mutated.

Key Functions:
    - Example.from_actions(start, actions): Build steps by running the actions
    - Example.truncated(max_steps): Shorter copy with recomputed answer
    - Example.to_trainer_format(): {start, steps: ["+3", "-1"], answer}

Dependencies:
    - dataclasses (std)
    - typing (std)

Used By:
    - rules: validate_example(), decompose_action()
    - generator.sequence, generator.multi_digit: example assembly
    - core.utils.serialization: token format
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal, Tuple


MicroStepKind = Literal["direct", "five", "units", "ten"]


@dataclass(frozen=True, slots=True)
class Step:
    """
    One action of an exercise.

    Attributes:
        action: Signed delta applied to the state
        from_state: Composite numeric state before the action
        to_state: Composite numeric state after the action

    Invariants:
        - to_state == from_state + action
    """

    action: int
    from_state: int
    to_state: int

    def __post_init__(self) -> None:
        """Validate step on construction."""
        if self.to_state != self.from_state + self.action:
            raise ValueError(
                f"Inconsistent step: {self.from_state} {self.action:+d} != {self.to_state}"
            )

    @classmethod
    def apply(cls, from_state: int, action: int) -> Step:
        """Create the step that applies ``action`` to ``from_state``."""
        return cls(action=action, from_state=from_state, to_state=from_state + action)

    @property
    def token(self) -> str:
        """Signed token as printed on a worksheet ("+3", "-12")."""
        return f"{self.action:+d}"


@dataclass(frozen=True)
class Example:
    """
    A generated exercise.

    Step order is the exercise order. ``answer`` is stored as produced by the
    generator so that validation can detect a mismatch; use
    ``is_consistent`` to check it.

    Attributes:
        start: Starting state
        steps: Ordered steps
        answer: Final state

    Example:
        >>> ex = Example.from_actions(0, [3, 1, -2])
        >>> ex.answer
        2
        >>> ex.to_trainer_format()
        {'start': 0, 'steps': ['+3', '+1', '-2'], 'answer': 2}
    """

    start: int
    steps: Tuple[Step, ...]
    answer: int

    def __post_init__(self) -> None:
        if not isinstance(self.steps, tuple):
            object.__setattr__(self, "steps", tuple(self.steps))

    # ─────────────────────────────────────────────────────────────────────────
    # Factory Methods
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_actions(cls, start: int, actions: Iterable[int]) -> Example:
        """
        Build an example by applying actions in order from ``start``.

        Args:
            start: Starting state
            actions: Signed deltas in exercise order

        Returns:
            Example whose answer is the running total after the last action
        """
        state = start
        steps = []
        for action in actions:
            step = Step.apply(state, action)
            steps.append(step)
            state = step.to_state
        return cls(start=start, steps=tuple(steps), answer=state)

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def actions(self) -> Tuple[int, ...]:
        """Step actions in exercise order."""
        return tuple(step.action for step in self.steps)

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def running_totals(self) -> Tuple[int, ...]:
        """State after each step, recomputed from ``start``."""
        totals = []
        state = self.start
        for action in self.actions:
            state += action
            totals.append(state)
        return tuple(totals)

    @property
    def is_consistent(self) -> bool:
        """True if answer == start + sum(actions) and steps chain together."""
        state = self.start
        for step in self.steps:
            if step.from_state != state:
                return False
            state = step.to_state
        return state == self.answer

    # ─────────────────────────────────────────────────────────────────────────
    # Transformations
    # ─────────────────────────────────────────────────────────────────────────

    def truncated(self, max_steps: int) -> Example:
        """
        Cut the example to at most ``max_steps`` steps.

        The answer is recomputed as the running sum up to the cut, not
        carried over from the longer example.

        Args:
            max_steps: Maximum number of steps to keep

        Returns:
            self if already short enough, otherwise a new Example
        """
        if len(self.steps) <= max_steps:
            return self
        kept = self.steps[:max_steps]
        answer = self.start + sum(step.action for step in kept)
        return Example(start=self.start, steps=kept, answer=answer)

    def to_trainer_format(self) -> dict[str, Any]:
        """
        Convert to the token format consumed by trainers and print layouts.

        Returns:
            {"start": int, "steps": ["+3", "-1", ...], "answer": int}
        """
        return {
            "start": self.start,
            "steps": [step.token for step in self.steps],
            "answer": self.answer,
        }


@dataclass(frozen=True, slots=True)
class MicroStep:
    """
    One bead movement in the pedagogical breakdown of an action.

    Attributes:
        action: Signed delta of this movement
        kind: Which beads move
            - "direct": the whole action counted directly
            - "five": the upper bead (±5)
            - "units": correction on the column itself
            - "ten": one bead on the neighbouring column (±10)
    """

    action: int
    kind: MicroStepKind

    def __post_init__(self) -> None:
        if self.kind not in ("direct", "five", "units", "ten"):
            raise ValueError(f"Invalid micro-step kind: {self.kind}")

    def __str__(self) -> str:
        return f"{self.action:+d}"
