from .core import RunConfig as RunConfig, run_load as run_load
from .errors import InundatorError as InundatorError
