from typing import List

from .run_stats import RunStats


class StatisticsAggregator:
    """
    Run-wide counters plus an epoch rate.

    The loop flushes one line per epoch. Lines start only after the first
    TCP connection succeeded, so a run that never connects prints nothing
    but its summary.
    """

    def __init__(
        self,
        label: str,
        unit: str,
        attempts_label: str,
        completions_label: str,
        interval: float = 1.0,
    ) -> None:
        self.label = label
        self.unit = unit
        self.attempts_label = attempts_label
        self.completions_label = completions_label
        self.interval = interval

        self._stats = RunStats()

    @property
    def attempts(self):
        return self._stats.attempts

    @property
    def completions(self):
        return self._stats.completions

    @property
    def errors(self):
        return self._stats.errors

    @property
    def connections(self):
        return self._stats.connections

    @property
    def tls_connects(self):
        return self._stats.tls_connects

    def record_attempt(self):
        self._stats.attempts += 1

    def rollback(self, pending: int):
        """Undo attempts that a disconnected peer never saw completed."""
        self._stats.attempts = max(0, self._stats.attempts - pending)

    def record_completions(self, count: int):
        self._stats.completions += count

    def record_error(self):
        self._stats.errors += 1

    def record_connection(self):
        self._stats.connections += 1

    def record_tls_connect(self):
        self._stats.tls_connects += 1

    def within_budget(self, limit: int | None) -> bool:
        return limit is None or self._stats.attempts < limit

    def start(self, now: float):
        self._stats.epoch_started = now
        self._stats.epoch_completions = self._stats.completions

    def epoch_due(self, now: float) -> bool:
        return now - self._stats.epoch_started >= self.interval

    def flush(
        self,
        now: float,
        connected: int,
    ) -> str | None:
        elapsed = now - self._stats.epoch_started
        completed = self._stats.completions - self._stats.epoch_completions

        self.start(now)

        if self._stats.connections == 0 or elapsed <= 0:
            return None

        rate = completed / elapsed

        return (
            f"{self.label} {self._stats.completions} "
            f"[{rate:.2f} {self.unit}], "
            f"{connected} Conn, "
            f"{self._stats.errors} Err"
        )

    def summary(self) -> List[str]:
        return [
            f"{self.attempts_label}: {self._stats.attempts}",
            f"{self.completions_label}: {self._stats.completions}",
            f"Errors: {self._stats.errors}",
        ]


def http_statistics(interval: float = 1.0):
    return StatisticsAggregator(
        "Responses",
        "r/s",
        "Requests sent",
        "Responses received",
        interval=interval,
    )


def tls_statistics(interval: float = 1.0):
    return StatisticsAggregator(
        "Handshakes",
        "h/s",
        "Renegotiations requested",
        "Renegotiations completed",
        interval=interval,
    )
