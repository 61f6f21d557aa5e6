from .root import run as run
from .target import parse_target as parse_target
