from dataclasses import dataclass
from enum import Enum
from typing import Optional, Literal, Union

AnswerLetter = Literal["A", "B", "C", "D", "E"]
ANSWER_LETTERS = ("A", "B", "C", "D", "E")

# bytes, base64 str, or a data:image/...;base64, URI
Frame = Union[bytes, str]

SCAN_INTERVAL = 30  # seconds

class ScanPhase(str, Enum):
    IDLE = "idle"          # no credential
    ARMED = "armed"        # countdown running
    SCANNING = "scanning"  # one solve call in flight

@dataclass
class SolveResult:
    found: bool
    answer: Optional[str] = None       # one of ANSWER_LETTERS when found
    explanation: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.found and self.error is None

@dataclass
class ScanState:
    phase: ScanPhase
    time_left: int
    interval: int = SCAN_INTERVAL
    last_result: Optional[SolveResult] = None
    # most recent InferenceFailure message; never replaces last_result
    last_error: Optional[str] = None
    scans: int = 0

    @property
    def is_scanning(self) -> bool:
        return self.phase is ScanPhase.SCANNING

    @property
    def setup_required(self) -> bool:
        return self.phase is ScanPhase.IDLE
