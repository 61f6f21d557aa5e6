import sys
import time
from typing import Callable, TextIO

from inundator.core.multiplexer import Multiplexer
from inundator.core.pool import ConnectionPool
from inundator.core.stats import StatisticsAggregator


class EventLoop:
    """
    Single-threaded driver. Each pass advances flagged peers, waits for
    readiness, flushes statistics when an epoch is due, sweeps connect
    timeouts, then gives every ready peer exactly one step.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        multiplexer: Multiplexer,
        stats: StatisticsAggregator,
        poll_interval: float = 1.0,
        max_completions: int | None = None,
        duration: float | None = None,
        output: TextIO | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._pool = pool
        self._multiplexer = multiplexer
        self._stats = stats
        self._poll_interval = poll_interval
        self._max_completions = max_completions
        self._duration = duration
        self._output = output or sys.stdout
        self._clock = clock

        self._started: float | None = None

    def should_stop(self, now: float):
        if (
            self._max_completions is not None
            and self._stats.completions >= self._max_completions
        ):
            return True

        if self._duration is not None and now - self._started >= self._duration:
            return True

        return False

    def run(self):
        self._started = self._clock()
        self._stats.start(self._started)
        self._pool.start()

        while not self.should_stop(self._clock()):
            self.run_once()

    def run_once(self):
        now = self._clock()
        self._pool.advance_peers(now)

        events = self._multiplexer.wait(self._next_timeout(now))

        now = self._clock()
        if self._stats.epoch_due(now):
            self._flush(now)

        self._pool.sweep_timeouts(now)

        for event in events:
            self._pool.dispatch(event)

    def _next_timeout(self, now: float):
        if any(peer.advance for peer in self._pool.peers):
            return 0

        timeout = self._poll_interval
        if self._duration is not None:
            remaining = self._duration - (now - self._started)
            timeout = max(0, min(timeout, remaining))

        return timeout

    def _flush(self, now: float):
        line = self._stats.flush(
            now,
            self._pool.connected_count(),
        )

        if line:
            self._output.write(line + "\n")
            self._output.flush()
