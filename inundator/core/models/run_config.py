from __future__ import annotations

from pydantic import BaseModel, StrictBool, StrictInt, model_validator

from inundator.env import Env
from inundator.errors import ConfigurationError

from .endpoint import Endpoint


class RunConfig(BaseModel):
    endpoint: Endpoint
    concurrency: StrictInt = 1
    max_requests: StrictInt | None = None
    duration: float | None = None
    pipeline_depth: StrictInt = 1
    slow_start: StrictBool = False
    accept: StrictBool = False
    skip_delay: StrictBool = False

    @model_validator(mode="after")
    def validate_counts(self) -> RunConfig:
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        if self.pipeline_depth < 1:
            raise ValueError("pipeline depth must be at least 1")

        if self.max_requests is not None and self.max_requests < 1:
            raise ValueError("request limit must be at least 1")

        if self.duration is not None and self.duration <= 0:
            raise ValueError("duration must be positive")

        return self

    def enforce_limits(self, env: Env):
        if self.concurrency > env.INUNDATOR_MAX_CONCURRENCY:
            raise ConfigurationError(
                "Concurrency exceeds the configured maximum",
                concurrency=self.concurrency,
                maximum=env.INUNDATOR_MAX_CONCURRENCY,
            )

        if len(self.endpoint.headers) > env.INUNDATOR_MAX_HEADERS:
            raise ConfigurationError(
                "Too many extra headers",
                headers=len(self.endpoint.headers),
                maximum=env.INUNDATOR_MAX_HEADERS,
            )
