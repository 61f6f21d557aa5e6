from dataclasses import dataclass

from .transfer_mode import TransferMode


@dataclass(slots=True, frozen=True)
class ParseResult:
    completed: int
    mode: TransferMode
    leftover: bytes = b""
    consumed: int = 0
