from __future__ import annotations

from typing import Callable, Dict, Literal, Union

from pydantic import BaseModel, StrictInt, StrictStr

PrimaryType = Union[str, int, float, bytes, bool]


class Env(BaseModel):
    INUNDATOR_MAX_CONCURRENCY: StrictInt = 4096
    INUNDATOR_MAX_HEADERS: StrictInt = 256
    INUNDATOR_WRITE_BUFFER_SIZE: StrictInt = 1024
    INUNDATOR_READ_BUFFER_SIZE: StrictInt = 65536
    INUNDATOR_CONNECT_TIMEOUT: StrictStr = "10s"
    INUNDATOR_POLL_INTERVAL: StrictStr = "1s"
    INUNDATOR_TLS_POLL_INTERVAL: StrictStr = "0.1s"
    INUNDATOR_STATS_INTERVAL: StrictStr = "1s"
    INUNDATOR_DUMMY_WRITE_INTERVAL: StrictInt = 50
    INUNDATOR_WARMUP_DELAY: StrictStr = "15s"
    INUNDATOR_TLS_CIPHERS: StrictStr = "AES256-SHA:RC4-MD5"
    INUNDATOR_LOG_LEVEL: StrictStr = "error"
    INUNDATOR_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"
    INUNDATOR_LOGS_DIRECTORY: StrictStr | None = None

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "INUNDATOR_MAX_CONCURRENCY": int,
            "INUNDATOR_MAX_HEADERS": int,
            "INUNDATOR_WRITE_BUFFER_SIZE": int,
            "INUNDATOR_READ_BUFFER_SIZE": int,
            "INUNDATOR_CONNECT_TIMEOUT": str,
            "INUNDATOR_POLL_INTERVAL": str,
            "INUNDATOR_TLS_POLL_INTERVAL": str,
            "INUNDATOR_STATS_INTERVAL": str,
            "INUNDATOR_DUMMY_WRITE_INTERVAL": int,
            "INUNDATOR_WARMUP_DELAY": str,
            "INUNDATOR_TLS_CIPHERS": str,
            "INUNDATOR_LOG_LEVEL": str,
            "INUNDATOR_LOG_OUTPUT": str,
            "INUNDATOR_LOGS_DIRECTORY": str,
        }
