"""
Module: core.errors

Purpose:
    Error taxonomy for exercise generation. Attempt-local errors are raised
    inside a single generation attempt and handled by the attempt loop;
    only ConfigInvalidError ever reaches a caller.

Key Classes:
    - GenerationError: Base for attempt-local failures
    - ActionUnavailableError: No legal action at the current step
    - ValidationFailureError: Assembled example rejected by its rule
    - AttemptsExhaustedError: Attempt budget consumed
    - ConfigInvalidError: Caller-supplied settings violate a precondition

Used By:
    - generator.sequence: SequenceGenerator attempt loop
    - generator.multi_digit: MultiDigitComposer attempt loop
    - rules.config, generator.config: configuration validation
"""


class GenerationError(Exception):
    """Attempt-local failure during example generation."""
    pass


class ActionUnavailableError(GenerationError):
    """No legal action exists at the current step of an attempt."""

    def __init__(self, step_index: int, state: object) -> None:
        self.step_index = step_index
        self.state = state
        super().__init__(f"No available actions at step {step_index}, state={state}")


class ValidationFailureError(GenerationError):
    """A fully assembled example failed its rule's validation."""
    pass


class AttemptsExhaustedError(GenerationError):
    """Attempt budget consumed without a valid example."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"No valid example after {attempts} attempts")


class ConfigInvalidError(ValueError):
    """Caller-supplied configuration violates a precondition."""
    pass
