"""
Core Models Package

Immutable models for generated exercises.

| Model | Meaning |
|-------|---------|
| `Step` | One action with the states before and after it |
| `Example` | Start value, ordered steps, answer |
| `MicroStep` | One bead movement in the breakdown of an action |
"""

from .example import Step, Example, MicroStep, MicroStepKind

__all__ = [
    "Step",
    "Example",
    "MicroStep",
    "MicroStepKind",
]
