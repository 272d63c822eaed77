"""
Module: generator.controller

Purpose:
    Build a complete worksheet: validate settings, pick the rule, generate
    the examples. Every item is a validated example or the fallback, so a
    valid configuration always yields examples_count items.

Key Functions:
    - build_worksheet(): Main entry point

Key Classes:
    - WorksheetItem: One numbered example
    - Worksheet: Immutable build result

Dependencies:
    - generator.selector: rule selection
    - generator.sequence: SequenceGenerator

Used By:
    - Trainer and print layers (external)
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from abacus_toolkit.core.models import Example
from abacus_toolkit.rules import RuleKind

from .config import WorksheetConfig
from .selector import select_rule
from .sequence import SequenceGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorksheetItem:
    """
    One numbered worksheet example.

    Attributes:
        id: 1-based position on the worksheet
        example: Generated example
        used_fallback: True if generation fell back
    """

    id: int
    example: Example
    used_fallback: bool = False

    def to_trainer_format(self) -> Dict[str, Any]:
        return {"id": self.id, **self.example.to_trainer_format()}


@dataclass(frozen=True)
class Worksheet:
    """
    Complete build result (immutable).

    Attributes:
        kind: Technique the examples train
        items: Numbered examples in order
        config: Configuration used

    Example:
        >>> worksheet = build_worksheet(config)
        >>> worksheet.to_trainer_format()[0]
        {'id': 1, 'start': 0, 'steps': ['+3', '+1', '-2'], 'answer': 2}
    """

    kind: RuleKind
    items: Tuple[WorksheetItem, ...]
    config: WorksheetConfig

    @property
    def examples(self) -> Tuple[Example, ...]:
        return tuple(item.example for item in self.items)

    @property
    def fallback_count(self) -> int:
        return sum(1 for item in self.items if item.used_fallback)

    def to_trainer_format(self) -> List[Dict[str, Any]]:
        """List of {id, start, steps, answer} dicts in worksheet order."""
        return [item.to_trainer_format() for item in self.items]


def build_worksheet(config: WorksheetConfig) -> Worksheet:
    """
    Generate every example of a worksheet.

    Args:
        config: Worksheet configuration

    Returns:
        Worksheet with config.examples_count items

    Raises:
        ConfigInvalidError: If the chosen block's digits do not fit its technique
    """
    start_time = time.perf_counter()
    logger.info(
        f"Building worksheet: {config.examples_count} examples, "
        f"blocks={list(config.active_blocks)}, digit_count={config.digit_count}, seed={config.seed}"
    )

    rng = random.Random(config.seed)
    rule = select_rule(config, rng)
    generator = SequenceGenerator(rule, rng=rng, max_attempts=config.max_attempts_per_example)

    items = []
    for index in range(config.examples_count):
        result = generator.generate_result()
        items.append(WorksheetItem(id=index + 1, example=result.example, used_fallback=result.used_fallback))

    worksheet = Worksheet(kind=rule.kind, items=tuple(items), config=config)

    elapsed = time.perf_counter() - start_time
    logger.info(f"Worksheet built: {len(items)} examples in {elapsed:.2f}s")
    if worksheet.fallback_count:
        logger.warning(f"{worksheet.fallback_count} of {len(items)} examples used the fallback")
    return worksheet
