from .models import Endpoint as Endpoint, RunConfig as RunConfig
from .runner import run_load as run_load
