from .endpoint import Endpoint as Endpoint
from .request import build_request as build_request
from .run_config import RunConfig as RunConfig
