from .models import Entry, LogLevel


class PeerDebug(Entry, kw_only=True):
    peer_id: int
    state: str
    level: LogLevel = LogLevel.DEBUG

class PeerError(Entry, kw_only=True):
    peer_id: int
    state: str
    level: LogLevel = LogLevel.ERROR

class RunInfo(Entry, kw_only=True):
    target: str
    protocol: str
    concurrency: int
    level: LogLevel = LogLevel.INFO

class RunFatal(Entry, kw_only=True):
    target: str
    protocol: str
    concurrency: int
    error_type: str
    level: LogLevel = LogLevel.FATAL
