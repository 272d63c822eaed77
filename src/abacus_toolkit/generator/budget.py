"""
Module: generator.budget

Purpose:
    Attempt budgets and the fixed fallback example. Exhausting a budget is
    the only way generation stops without a validated example, and it
    always ends in the fallback rather than an error.

Key Functions:
    - attempt_budget(): Attempts allowed for a digit count / column mode

Key Classes:
    - GenerationResult: Example plus how it was obtained

Used By:
    - generator.sequence: SequenceGenerator
    - generator.multi_digit: MultiDigitComposer
"""

from __future__ import annotations

from dataclasses import dataclass

from abacus_toolkit.core.models import Example

SINGLE_COLUMN_ATTEMPTS = 100
FEW_COLUMNS_ATTEMPTS = 200
MANY_COLUMNS_ATTEMPTS = 250
FEW_COLUMNS_LIMIT = 3

# start=0: +1, +1, -1 -> 1
FALLBACK_EXAMPLE = Example.from_actions(0, (1, 1, -1))


def attempt_budget(digit_count: int, combine_levels: bool) -> int:
    """
    Number of attempts allowed before falling back.

    Args:
        digit_count: Columns in use
        combine_levels: Columns move in lock-step

    Returns:
        100 for one column; otherwise 200 (up to 3 columns) or 250,
        doubled when columns move independently

    Example:
        >>> attempt_budget(2, combine_levels=False)
        400
    """
    if digit_count <= 1:
        return SINGLE_COLUMN_ATTEMPTS
    budget = FEW_COLUMNS_ATTEMPTS if digit_count <= FEW_COLUMNS_LIMIT else MANY_COLUMNS_ATTEMPTS
    if not combine_levels:
        budget *= 2
    return budget


@dataclass(frozen=True)
class GenerationResult:
    """
    Outcome of one generation call (immutable).

    Attributes:
        example: Validated example, or the fallback
        attempts: Attempts used
        used_fallback: True if the budget ran out
    """

    example: Example
    attempts: int
    used_fallback: bool = False
