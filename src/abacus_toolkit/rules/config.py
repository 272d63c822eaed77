"""
Module: rules.config

Purpose:
    Configuration dataclasses for the technique rules. Immutable
    configuration with validation on construction; sequences are normalised
    to tuples so a config can be shared between rules safely.

Key Classes:
    - BlockSettings: Digits and flags of one settings block
    - RuleConfig: Configuration consumed by every rule variant

Dependencies:
    - dataclasses (std)
    - types (std): MappingProxyType keeps the block settings read-only

Used By:
    - rules.simple, rules.brothers, rules.friends, rules.mix
    - generator.selector: builds a RuleConfig from worksheet settings
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from abacus_toolkit.core.errors import ConfigInvalidError

logger = logging.getLogger(__name__)

BLOCK_NAMES: Tuple[str, ...] = ("simple", "brothers", "friends", "mix")

DEFAULT_FILLER_DIGITS: Tuple[int, ...] = (1, 2, 3, 4, 5)

MAX_DIGIT_COUNT = 9


@dataclass(frozen=True)
class BlockSettings:
    """
    Settings of one block ("simple", "brothers", "friends" or "mix").

    A block is active when it has at least one digit selected.

    Attributes:
        digits: Selected digits of the block
        only_addition: Block restricted to additions
        only_subtraction: Block restricted to subtractions
    """

    digits: Tuple[int, ...] = ()
    only_addition: bool = False
    only_subtraction: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "digits", tuple(dict.fromkeys(int(d) for d in self.digits)))
        bad = [d for d in self.digits if not 0 <= d <= 9]
        if bad:
            raise ConfigInvalidError(f"Block digits must be in [0, 9]: {bad}")

    @property
    def is_active(self) -> bool:
        return len(self.digits) > 0

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> BlockSettings:
        """
        Build from a settings mapping.

        Accepts both ``only_addition`` and the camelCase ``onlyAddition``
        spelling used by the settings form.

        Raises:
            ConfigInvalidError: If an unknown key is present
        """
        known = {"digits", "only_addition", "only_subtraction", "onlyAddition", "onlySubtraction"}
        unknown = set(data) - known
        if unknown:
            raise ConfigInvalidError(f"Unknown block settings: {sorted(unknown)}")
        return cls(
            digits=tuple(int(d) for d in data.get("digits", ()) or ()),  # type: ignore[union-attr]
            only_addition=bool(data.get("only_addition", data.get("onlyAddition", False))),
            only_subtraction=bool(data.get("only_subtraction", data.get("onlySubtraction", False))),
        )


@dataclass(frozen=True)
class RuleConfig:
    """
    Configuration for a technique rule (immutable).

    Attributes:
        selected_digits: Digits the technique trains
        min_steps: Minimum number of steps per example
        max_steps: Maximum number of steps per example
        only_addition: Offer additions only
        only_subtraction: Offer subtractions only
        digit_count: Number of device columns in use (1-9)
        combine_levels: All columns move in lock-step on one action
        blocks: Sibling block settings, used for filler steps
        signature_priority: Bias toward signature transitions; None picks
            the variant's default
        include_five: Simple rule only - force the five-bead mode

    Invariants:
        - selected_digits is non-empty
        - 1 <= min_steps <= max_steps
        - 1 <= digit_count <= 9
        - 0 <= signature_priority <= 1 when given

    Example:
        >>> config = RuleConfig(selected_digits=(1, 2, 3, 4), min_steps=3, max_steps=3)
        >>> config.filler_digits
        (1, 2, 3, 4, 5)
    """

    selected_digits: Tuple[int, ...]
    min_steps: int = 3
    max_steps: int = 7
    only_addition: bool = False
    only_subtraction: bool = False
    digit_count: int = 1
    combine_levels: bool = False
    blocks: Mapping[str, BlockSettings] = field(default_factory=dict, hash=False)
    signature_priority: Optional[float] = None
    include_five: bool = False

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        object.__setattr__(self, "selected_digits", tuple(dict.fromkeys(int(d) for d in self.selected_digits)))
        object.__setattr__(self, "blocks", MappingProxyType(dict(self.blocks)))

        if not self.selected_digits:
            raise ConfigInvalidError("selected_digits must not be empty")
        if self.min_steps < 1:
            raise ConfigInvalidError(f"min_steps must be positive: {self.min_steps}")
        if self.max_steps < self.min_steps:
            raise ConfigInvalidError(
                f"max_steps ({self.max_steps}) must be >= min_steps ({self.min_steps})"
            )
        if not 1 <= self.digit_count <= MAX_DIGIT_COUNT:
            raise ConfigInvalidError(
                f"digit_count must be in [1, {MAX_DIGIT_COUNT}]: {self.digit_count}"
            )
        if self.signature_priority is not None and not 0.0 <= self.signature_priority <= 1.0:
            raise ConfigInvalidError(
                f"signature_priority must be in [0, 1]: {self.signature_priority}"
            )
        unknown = set(self.blocks) - set(BLOCK_NAMES)
        if unknown:
            raise ConfigInvalidError(f"Unknown blocks: {sorted(unknown)}")
        for name, block in self.blocks.items():
            if not isinstance(block, BlockSettings):
                raise ConfigInvalidError(f"Block {name!r} must be BlockSettings, got {type(block).__name__}")

        if self.only_addition and self.only_subtraction:
            logger.warning(
                "Both only_addition and only_subtraction are set; no exercise can satisfy both"
            )

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def filler_digits(self) -> Tuple[int, ...]:
        """
        Digits for plain (non-technique) steps.

        Returns:
            Non-zero digits of the "simple" block, or (1, 2, 3, 4, 5)
        """
        simple = self.blocks.get("simple")
        if simple is not None and simple.is_active:
            digits = tuple(d for d in simple.digits if d >= 1)
            if digits:
                return digits
        return DEFAULT_FILLER_DIGITS

    def allows_sign(self, action: int) -> bool:
        """
        Check an action against the only_addition/only_subtraction flags.

        Args:
            action: Signed delta

        Returns:
            False if the action's sign is excluded by a flag
        """
        if self.only_addition and action < 0:
            return False
        if self.only_subtraction and action > 0:
            return False
        return True
