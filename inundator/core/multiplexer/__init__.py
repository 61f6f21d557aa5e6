from .interest import Interest as Interest
from .multiplexer import Multiplexer as Multiplexer
from .readiness_event import ReadinessEvent as ReadinessEvent
