from dataclasses import dataclass


@dataclass(slots=True)
class RunStats:
    attempts: int = 0
    completions: int = 0
    errors: int = 0
    connections: int = 0
    tls_connects: int = 0
    epoch_started: float = 0.0
    epoch_completions: int = 0
