"""
Module: generator.config

Purpose:
    Configuration dataclass for building a worksheet. Immutable
    configuration with validation on construction.

Key Classes:
    - WorksheetConfig: Settings for build_worksheet()

Dependencies:
    - dataclasses (std)
    - types (std): MappingProxyType keeps the block settings read-only
    - abacus_toolkit.rules.config: BlockSettings

Used By:
    - generator.selector: select_rule
    - generator.controller: build_worksheet
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from abacus_toolkit.core.errors import ConfigInvalidError
from abacus_toolkit.rules.config import BLOCK_NAMES, MAX_DIGIT_COUNT, BlockSettings

MAX_EXAMPLES = 1000
MAX_ACTIONS = 20

# Blocks that need at least two device columns
TWO_COLUMN_BLOCKS = ("friends", "mix")

_KEY_ALIASES = {
    "examplesCount": "examples_count",
    "actionsCount": "actions_count",
    "digitCount": "digit_count",
    "combineLevels": "combine_levels",
    "minActions": "min_actions",
    "maxActions": "max_actions",
    "maxAttemptsPerExample": "max_attempts_per_example",
}


@dataclass(frozen=True)
class WorksheetConfig:
    """
    Configuration for one worksheet (immutable).

    Attributes:
        examples_count: Number of examples (1-1000)
        actions_count: Steps per example (1-20)
        digit_count: Digits per number (1-9)
        combine_levels: Variable-length numbers / lock-step columns
        blocks: Block settings keyed by name; at least one must be active
        min_actions: Lower step count; defaults to actions_count
        max_actions: Upper step count; defaults to actions_count
        seed: Random seed; None for a fresh seed
        max_attempts_per_example: Attempt budget override

    Invariants:
        - 1 <= min_actions <= max_actions <= 20
        - friends/mix blocks need digit_count >= 2

    Example:
        >>> config = WorksheetConfig(
        ...     examples_count=10,
        ...     blocks={"simple": BlockSettings(digits=(1, 2, 3, 4))},
        ...     seed=42,
        ... )
        >>> config.step_range
        (5, 5)
    """

    examples_count: int = 20
    actions_count: int = 5
    digit_count: int = 1
    combine_levels: bool = False
    blocks: Mapping[str, BlockSettings] = field(default_factory=dict, hash=False)
    min_actions: Optional[int] = None
    max_actions: Optional[int] = None
    seed: Optional[int] = None
    max_attempts_per_example: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        blocks = {
            name: block if isinstance(block, BlockSettings) else BlockSettings.from_dict(block)
            for name, block in self.blocks.items()
        }
        object.__setattr__(self, "blocks", MappingProxyType(blocks))

        if not 1 <= self.examples_count <= MAX_EXAMPLES:
            raise ConfigInvalidError(
                f"examples_count must be in [1, {MAX_EXAMPLES}]: {self.examples_count}"
            )
        if not 1 <= self.actions_count <= MAX_ACTIONS:
            raise ConfigInvalidError(
                f"actions_count must be in [1, {MAX_ACTIONS}]: {self.actions_count}"
            )
        low, high = self.step_range
        if not 1 <= low <= high <= MAX_ACTIONS:
            raise ConfigInvalidError(
                f"Action range must satisfy 1 <= min <= max <= {MAX_ACTIONS}: [{low}, {high}]"
            )
        if not 1 <= self.digit_count <= MAX_DIGIT_COUNT:
            raise ConfigInvalidError(
                f"digit_count must be in [1, {MAX_DIGIT_COUNT}]: {self.digit_count}"
            )
        if self.max_attempts_per_example is not None and self.max_attempts_per_example < 1:
            raise ConfigInvalidError(
                f"max_attempts_per_example must be positive: {self.max_attempts_per_example}"
            )

        unknown = set(blocks) - set(BLOCK_NAMES)
        if unknown:
            raise ConfigInvalidError(f"Unknown blocks: {sorted(unknown)}")
        if not self.active_blocks:
            raise ConfigInvalidError("At least one block must have digits selected")
        for name in TWO_COLUMN_BLOCKS:
            if name in self.active_blocks and self.digit_count < 2:
                raise ConfigInvalidError(f"The {name!r} block requires digit_count >= 2")

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def step_range(self) -> Tuple[int, int]:
        """(min, max) steps per example."""
        low = self.min_actions if self.min_actions is not None else self.actions_count
        high = self.max_actions if self.max_actions is not None else self.actions_count
        return low, high

    @property
    def active_blocks(self) -> Tuple[str, ...]:
        """Names of blocks with digits selected, in BLOCK_NAMES order."""
        return tuple(
            name for name in BLOCK_NAMES if name in self.blocks and self.blocks[name].is_active
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Factory Methods
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> WorksheetConfig:
        """
        Build from a settings mapping.

        Keys may be snake_case or the camelCase used by the settings form
        ("examplesCount", "digitCount", ...). Block values may be mappings.

        Raises:
            ConfigInvalidError: If an unknown key is present or a value is invalid
        """
        known = {f for f in cls.__dataclass_fields__}
        values = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in known:
                raise ConfigInvalidError(f"Unknown worksheet setting: {key!r}")
            values[name] = value
        values["blocks"] = dict(values.get("blocks") or {})  # type: ignore[arg-type]
        return cls(**values)  # type: ignore[arg-type]
