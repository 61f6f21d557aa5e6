from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class StepResult:
    """Outcome of one peer step, applied by the pool."""

    first_connect: bool = False
    recycle: bool = False
    count_error: bool = False


CONTINUE = StepResult()
HANGUP = StepResult(
    recycle=True,
    count_error=True,
)
