"""
Serialization Utilities

Converts examples to and from the token format consumed by trainers,
print layouts and exports:

    {"start": 0, "steps": ["+3", "+1", "-2"], "answer": 2}

Layout, CSV export and persistence live outside this package; they only
ever see this dictionary.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

from ..models.example import Example


_TOKEN_RE = re.compile(r"^\s*([+-])\s*(\d+)\s*$")


# ─────────────────────────────────────────────────────────────────────────────
# Action Tokens
# ─────────────────────────────────────────────────────────────────────────────

def format_action(action: int) -> str:
    """
    Format a signed action as a worksheet token.

    Args:
        action: Signed delta

    Returns:
        "+N" for non-negative actions, "-N" otherwise
    """
    return f"{action:+d}"


def parse_action_token(token: str) -> int:
    """
    Parse a worksheet token back to a signed integer.

    Args:
        token: Token like "+3" or "-12"; the sign is mandatory

    Returns:
        Signed integer value

    Raises:
        ValueError: If the token is not a signed integer
    """
    match = _TOKEN_RE.match(token)
    if not match:
        raise ValueError(f"Invalid action token: {token!r}")
    sign, digits = match.groups()
    value = int(digits)
    return -value if sign == "-" else value


# ─────────────────────────────────────────────────────────────────────────────
# Example Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_example(example: Example) -> dict[str, Any]:
    """
    Serialize an Example to the trainer token format.

    Args:
        example: Example to serialize

    Returns:
        Dictionary with start, step tokens and answer
    """
    return example.to_trainer_format()


def deserialize_example(data: dict[str, Any], *, validate: bool = True) -> Example:
    """
    Rebuild an Example from the trainer token format.

    Args:
        data: Dictionary with "steps" and optional "start" (default 0) and "answer"
        validate: If True, the stored answer must match the replayed steps

    Returns:
        Example instance

    Raises:
        ValueError: If a token is malformed, or validate=True and the answer
            does not match
    """
    start = int(data.get("start", 0))
    actions = [parse_action_token(token) for token in data["steps"]]
    example = Example.from_actions(start, actions)

    if "answer" in data:
        answer = int(data["answer"])
        if validate and answer != example.answer:
            raise ValueError(
                f"Answer mismatch: stored {answer}, replayed {example.answer}"
            )
        if answer != example.answer:
            example = Example(start=start, steps=example.steps, answer=answer)
    return example


def serialize_examples(examples: Iterable[Example]) -> list[dict[str, Any]]:
    """Serialize several examples, preserving order."""
    return [serialize_example(example) for example in examples]
