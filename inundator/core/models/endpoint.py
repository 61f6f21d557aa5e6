from __future__ import annotations

from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr

Protocol = Literal["http", "https", "tls"]


class Endpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    protocol: Protocol
    host: StrictStr
    port: StrictInt
    path: StrictStr = "/"
    headers: Tuple[StrictStr, ...] = ()

    @property
    def is_tls(self):
        return self.protocol in ("https", "tls")

    @property
    def authority(self):
        if self.port in (80, 443):
            return self.host

        return f"{self.host}:{self.port}"

    def __str__(self) -> str:
        if self.protocol == "tls":
            return f"{self.host}:{self.port}"

        return f"{self.protocol}://{self.authority}{self.path}"
