"""Test doubles for the camera, solver and status store."""

import asyncio

from exammega.adapters.camera.base import CameraAdapter
from exammega.adapters.solver.base import SolverAdapter
from exammega.orchestrator.contracts import SolveResult
from exammega.services.status_store import StatusStore

JPEG = b"\xff\xd8\xff\xe0fake-jpeg"


class FakeCamera(CameraAdapter):
    def __init__(self, frame: bytes | None = JPEG):
        self.frame = frame
        self.captures = 0

    def capture_bytes(self) -> bytes | None:
        self.captures += 1
        return self.frame


class StaticSolver(SolverAdapter):
    """Returns the same result immediately and counts calls."""

    def __init__(self, result: SolveResult):
        self.result = result
        self.calls = 0
        self.frames = []

    async def solve(self, frame):
        self.calls += 1
        self.frames.append(frame)
        return self.result


class HeldSolver(SolverAdapter):
    """Blocks inside solve() until release is set."""

    def __init__(self, result: SolveResult):
        self.result = result
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def solve(self, frame):
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.started.set()
        try:
            await self.release.wait()
            return self.result
        finally:
            self.active -= 1


class RecordingStatus(StatusStore):
    """StatusStore that keeps every published ScanState."""

    def __init__(self):
        super().__init__()
        self.published = []

    def publish(self, state):
        super().publish(state)
        self.published.append(state)


def answer(letter: str = "B", explanation: str = "because") -> SolveResult:
    return SolveResult(found=True, answer=letter, explanation=explanation)
