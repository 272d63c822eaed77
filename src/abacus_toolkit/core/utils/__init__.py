"""
Utils Package

Serialization of examples to the trainer token format.
"""

from .serialization import (
    format_action,
    parse_action_token,
    serialize_example,
    deserialize_example,
    serialize_examples,
)

__all__ = [
    "format_action",
    "parse_action_token",
    "serialize_example",
    "deserialize_example",
    "serialize_examples",
]
