"""
Module: generator

Purpose:
    Exercise generation on top of the technique rules: the bounded
    attempt loop, multi-digit composition, rule selection from worksheet
    settings and the worksheet build.

Key Functions:
    - build_worksheet(): Settings -> numbered examples
    - select_rule(): Settings -> Rule or MultiDigitComposer
    - attempt_budget(): Attempts allowed before the fallback

Key Classes:
    - SequenceGenerator, MultiDigitComposer
    - WorksheetConfig, Worksheet, WorksheetItem
    - GenerationResult

Example:
    >>> from abacus_toolkit.generator import WorksheetConfig, build_worksheet
    >>> from abacus_toolkit.rules import BlockSettings
    >>> config = WorksheetConfig(
    ...     examples_count=5,
    ...     blocks={"brothers": BlockSettings(digits=(4,))},
    ...     seed=1,
    ... )
    >>> len(build_worksheet(config).items)
    5
"""

from .budget import FALLBACK_EXAMPLE, GenerationResult, attempt_budget
from .multi_digit import MultiDigitComposer
from .sequence import SequenceGenerator, compose_columns
from .config import WorksheetConfig
from .selector import active_kind, build_rule_config, select_rule
from .controller import Worksheet, WorksheetItem, build_worksheet

__all__ = [
    "FALLBACK_EXAMPLE",
    "GenerationResult",
    "attempt_budget",
    "MultiDigitComposer",
    "SequenceGenerator",
    "compose_columns",
    "WorksheetConfig",
    "active_kind",
    "build_rule_config",
    "select_rule",
    "Worksheet",
    "WorksheetItem",
    "build_worksheet",
]
