"""
Module: rules.base

Purpose:
    The capability set every technique implements (the Rule protocol), the
    closed set of techniques (RuleKind), and RuleSupport - the shared helper
    each rule delegates its default behaviour to: start state, step count,
    action multiset assembly and example validation.

Key Classes:
    - RuleKind: SIMPLE, BROTHERS, FRIENDS, MIX
    - Rule: Protocol implemented by SimpleRule, BrothersRule, FriendsRule, MixRule
    - RuleSupport: Default behaviour shared by composition

Design:
    Rules do not inherit from a base class. Each holds a RuleSupport and
    supplies its own classifier and legality checks to it, so a variant
    overrides behaviour by passing different callables rather than by
    overriding methods.

Dependencies:
    - random (std): injected pseudo-random source
    - logging (std)

Used By:
    - rules.simple, rules.brothers, rules.friends, rules.mix
    - generator.sequence, generator.multi_digit
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence, runtime_checkable

from abacus_toolkit.core.models import Example, MicroStep

from .config import RuleConfig

logger = logging.getLogger(__name__)

# (from_state, to_state) -> bool
TransitionClassifier = Callable[[int, int], bool]
# (state, action) -> bool
MoveCheck = Callable[[int, int], bool]


class RuleKind(Enum):
    """
    The closed set of techniques.

    Values match the settings block names.

    Attributes:
        SIMPLE: Direct counting on one column
        BROTHERS: Compensation through the upper bead (pairs summing to 5)
        FRIENDS: Compensation through the next column (pairs summing to 10)
        MIX: A friend move whose units compensation needs a brother
    """

    SIMPLE = "simple"
    BROTHERS = "brothers"
    FRIENDS = "friends"
    MIX = "mix"


@runtime_checkable
class Rule(Protocol):
    """
    Capability set of a technique rule.

    Attributes:
        kind: Which technique this is
        config: The rule's immutable configuration
        rng: Injected pseudo-random source
        max_state: Highest state the rule allows (4, 9 or 99)
        column_width: Number of device columns one state spans (1 or 2)
        requires_signature: Valid examples must contain a signature transition
        signature_weight: Copies of each signature action in the multiset

    ``is_legal_move(state, action)`` is the rule's test for a plain
    (non-signature) move on one column window; the multi-digit composer
    applies it to every column an action touches.
    """

    kind: RuleKind
    config: RuleConfig
    rng: random.Random

    @property
    def max_state(self) -> int: ...

    @property
    def column_width(self) -> int: ...

    @property
    def requires_signature(self) -> bool: ...

    @property
    def signature_weight(self) -> int: ...

    def generate_start_state(self) -> int: ...

    def generate_steps_count(self) -> int: ...

    def get_available_actions(self, state: int, is_first: bool) -> List[int]: ...

    def apply_action(self, state: int, action: int) -> int: ...

    def is_signature_transition(self, from_state: int, to_state: int) -> bool: ...

    def is_legal_move(self, state: int, action: int) -> bool: ...

    def decompose_action(self, state: int, action: int) -> List[MicroStep]: ...

    def validate_example(self, example: Example, *, require_signature: bool = True) -> bool: ...


def weight_from_priority(priority: float) -> int:
    """
    Convert a priority in [0, 1] to a replication count.

    Example:
        >>> weight_from_priority(0.6)
        6
    """
    return int(priority * 10 + 1e-9)


class RuleSupport:
    """
    Default rule behaviour, shared by composition.

    Attributes:
        config: Configuration of the owning rule
        rng: Pseudo-random source of the owning rule
        max_state: Upper state bound of the owning rule
        name: Rule name used in log messages
    """

    def __init__(self, config: RuleConfig, rng: random.Random, max_state: int, name: str) -> None:
        self.config = config
        self.rng = rng
        self.min_state = 0
        self.max_state = max_state
        self.name = name

    # ─────────────────────────────────────────────────────────────────────────
    # Defaults
    # ─────────────────────────────────────────────────────────────────────────

    def generate_start_state(self) -> int:
        return 0

    def generate_steps_count(self) -> int:
        """Uniform step count in [min_steps, max_steps]."""
        return self.rng.randint(self.config.min_steps, self.config.max_steps)

    @staticmethod
    def apply_action(state: int, action: int) -> int:
        return state + action

    def in_bounds(self, state: int) -> bool:
        return self.min_state <= state <= self.max_state

    @staticmethod
    def direct_decomposition(action: int) -> List[MicroStep]:
        return [MicroStep(action, "direct")]

    # ─────────────────────────────────────────────────────────────────────────
    # Action Multiset
    # ─────────────────────────────────────────────────────────────────────────

    def collect_actions(
        self,
        state: int,
        is_first: bool,
        *,
        filler_digits: Sequence[int],
        technique_digits: Sequence[int] = (),
        is_signature: Optional[TransitionClassifier] = None,
        weight: int = 0,
        filler_check: Optional[MoveCheck] = None,
    ) -> List[int]:
        """
        Assemble the legal-action multiset for ``state``.

        Filler actions appear once each; signature actions appear ``weight``
        times each, so uniform sampling over the list is biased toward the
        technique. A filler action that is itself a signature transition is
        left to the signature pass.

        Args:
            state: Current state
            is_first: First step of the exercise
            filler_digits: Digits for plain steps
            technique_digits: Digits of the trained technique
            is_signature: Signature classifier; None means no signature moves
            weight: Copies of each signature action
            filler_check: Extra legality test for filler actions

        Returns:
            Actions in offer order (additions first), possibly repeated
        """
        signs: List[int] = []
        positive_only = is_first or state == 0
        if not self.config.only_subtraction:
            signs.append(1)
        if not positive_only and not self.config.only_addition:
            signs.append(-1)

        actions: List[int] = []
        for sign in signs:
            for digit in filler_digits:
                action = sign * digit
                target = state + action
                if not self.in_bounds(target):
                    continue
                if is_signature is not None and is_signature(state, target):
                    continue
                if filler_check is not None and not filler_check(state, action):
                    continue
                actions.append(action)

            if is_signature is None:
                continue
            for digit in technique_digits:
                action = sign * digit
                target = state + action
                if self.in_bounds(target) and is_signature(state, target):
                    actions.extend([action] * weight)

        return actions

    # ─────────────────────────────────────────────────────────────────────────
    # Validation
    # ─────────────────────────────────────────────────────────────────────────

    def find_violations(
        self,
        example: Example,
        *,
        is_signature: Optional[TransitionClassifier] = None,
        step_check: Optional[MoveCheck] = None,
        in_bounds: Optional[Callable[[int], bool]] = None,
    ) -> List[str]:
        """
        Re-simulate an example and list every rule it breaks.

        Checks:
        1. Final state equals the stored answer and steps chain together
        2. Every intermediate state is within bounds
        3. only_addition / only_subtraction flags hold for every step
        4. At least one signature transition (when is_signature is given)

        Args:
            example: Example to check
            is_signature: Signature classifier; None skips check 4
            step_check: Per-step legality test (state, action)
            in_bounds: Bounds test; defaults to [0, max_state]

        Returns:
            Descriptions of the violations, empty if the example is valid
        """
        bounds = in_bounds or self.in_bounds
        violations: List[str] = []

        if not example.steps:
            return ["example has no steps"]

        state = example.start
        has_signature = False
        for index, step in enumerate(example.steps):
            if step.from_state != state:
                violations.append(f"step {index} starts at {step.from_state}, expected {state}")
            if step_check is not None and not step_check(state, step.action):
                violations.append(f"step {index}: {step.action:+d} not possible from {state}")
            target = self.apply_action(state, step.action)
            if not bounds(target):
                violations.append(f"step {index}: state {target} out of bounds")
            if is_signature is not None and is_signature(state, target):
                has_signature = True
            if not self.config.allows_sign(step.action):
                violations.append(f"step {index}: {step.action:+d} excluded by only_* flags")
            state = target

        if state != example.answer:
            violations.append(f"answer {example.answer} != replayed {state}")
        if is_signature is not None and not has_signature:
            violations.append("no signature transition")

        return violations

    def validate(self, example: Example, **checks) -> bool:
        """Run find_violations() and log the reasons at debug level."""
        violations = self.find_violations(example, **checks)
        if violations:
            logger.debug(f"{self.name}: example rejected: {'; '.join(violations)}")
            return False
        return True
