import logging
from dataclasses import dataclass, field
from typing import Optional, List
from exammega.orchestrator.contracts import ScanState, ScanPhase, SCAN_INTERVAL

logger = logging.getLogger("exammega")

@dataclass
class StatusStore:
    scan: ScanState = field(default_factory=lambda: ScanState(phase=ScanPhase.IDLE, time_left=SCAN_INTERVAL))
    logs: List[str] = field(default_factory=list)
    max_logs: int = 200

    @property
    def busy(self) -> bool:
        return self.scan.is_scanning

    @property
    def last_error(self) -> Optional[str]:
        return self.scan.last_error

    def publish(self, state: ScanState):
        self.scan = state

    def log(self, msg: str):
        logger.info(msg)
        self.logs.append(msg)
        if len(self.logs) > self.max_logs:
            self.logs = self.logs[-self.max_logs:]
