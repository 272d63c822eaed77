"""
Module: rules.beads

Purpose:
    Bead model of a single device column: one upper bead worth 5 and four
    lower beads worth 1. A direct move flips beads in one direction only
    (toward the bar when adding, away from it when subtracting).

Key Functions:
    - split_column(): State -> (upper active, lower active count)
    - is_direct_move(): Whether an action can be counted directly
    - describe_state(): Human-readable bead breakdown for logs

Used By:
    - rules.simple: physical legality
    - rules.brothers: filler-step legality and the 5-boundary
    - rules.mix: units-column compensation check
"""

from __future__ import annotations

from typing import Tuple

UPPER_VALUE = 5
LOWER_BEADS = 4
COLUMN_MAX = UPPER_VALUE + LOWER_BEADS


def split_column(state: int) -> Tuple[int, int]:
    """
    Split a column state into its bead positions.

    Args:
        state: Column value in [0, 9]

    Returns:
        (upper, lower) where upper is 0 or 1 and lower is 0-4

    Raises:
        ValueError: If state is outside [0, 9]
    """
    if not 0 <= state <= COLUMN_MAX:
        raise ValueError(f"Column state must be in [0, {COLUMN_MAX}]: {state}")
    if state >= UPPER_VALUE:
        return 1, state - UPPER_VALUE
    return 0, state


def is_direct_move(state: int, action: int, max_state: int = COLUMN_MAX) -> bool:
    """
    Check whether ``action`` can be set on the column without compensation.

    Adding N needs the upper bead free when N's composition uses it and
    enough inactive lower beads; nothing already active may be moved back.
    Subtracting N is the mirror condition on active beads.

    Args:
        state: Current column value
        action: Signed delta
        max_state: Highest value the column may hold (4 or 9)

    Returns:
        True if the move is physically direct and stays within [0, max_state]
    """
    target = state + action
    if not 0 <= state <= max_state or not 0 <= target <= max_state:
        return False

    upper, lower = split_column(state)
    new_upper, new_lower = split_column(target)

    if action >= 0:
        return new_upper >= upper and new_lower >= lower
    return new_upper <= upper and new_lower <= lower


def describe_state(state: int) -> str:
    """Describe a column state as its bead breakdown, e.g. '7 = upper:1 + lower:2'."""
    if not 0 <= state <= COLUMN_MAX:
        return f"Invalid state: {state}"
    upper, lower = split_column(state)
    return f"{state} = upper:{upper} + lower:{lower}"
