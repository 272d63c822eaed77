"""
Abacus Toolkit Core Package

Shared data models, errors and serialization used by the rules and
the generators.

All models are frozen dataclasses: an Example is created, validated and
handed off, and never mutated afterwards. Truncation builds a new instance.
"""

from .errors import (
    GenerationError,
    ActionUnavailableError,
    ValidationFailureError,
    AttemptsExhaustedError,
    ConfigInvalidError,
)
from .models import Step, Example, MicroStep

__all__ = [
    "GenerationError",
    "ActionUnavailableError",
    "ValidationFailureError",
    "AttemptsExhaustedError",
    "ConfigInvalidError",
    "Step",
    "Example",
    "MicroStep",
]
