"""
Capture-and-solve scheduler.

One state machine driven by three event sources: the once-per-second tick,
the manual trigger and credential changes. All of them run on the same
asyncio loop, and every state change goes through _transition(), which also
publishes the new ScanState to the status store.

  IDLE ──credential──▶ ARMED ──tick→0 / trigger──▶ SCANNING ──done──▶ ARMED

While SCANNING the countdown is frozen and further triggers are dropped.
A result is applied only if the credential epoch it started under is still
current.
"""
import asyncio
from dataclasses import replace
from typing import Callable, Optional

from exammega.adapters.camera.base import CameraAdapter
from exammega.adapters.settings.base import SettingsStore, API_KEY_SETTING
from exammega.adapters.solver.base import SolverAdapter
from exammega.orchestrator.contracts import ScanPhase, ScanState, SolveResult, Frame, SCAN_INTERVAL
from exammega.orchestrator import errors
from exammega.orchestrator.errors import ConfigurationError, CaptureUnavailable, StaleResponse

SolverFactory = Callable[[str], SolverAdapter]
TICK_S = 1.0


class ScanScheduler:
    def __init__(self, camera: CameraAdapter, settings: SettingsStore, solver_factory: SolverFactory,
                 status_store, interval: int = SCAN_INTERVAL):
        if interval < 1:
            raise ValueError(f"interval must be >= 1s, got {interval}")
        self.camera = camera
        self.settings = settings
        self.solver_factory = solver_factory
        self.status = status_store
        self.interval = interval

        self._state = ScanState(phase=ScanPhase.IDLE, time_left=interval, interval=interval)
        self._solver: Optional[SolverAdapter] = None
        self._epoch = 0
        self._in_flight = 0
        self._stopping: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

        self.status.publish(self._state)
        self._install(settings.get(API_KEY_SETTING))

    # ── state ──────────────────────────────────────────────────────────────

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def has_credential(self) -> bool:
        return self._solver is not None

    def _transition(self, phase: Optional[ScanPhase] = None, **changes):
        if phase is not None:
            changes["phase"] = phase
        self._state = replace(self._state, **changes)
        self.status.publish(self._state)

    # ── credential ─────────────────────────────────────────────────────────

    def set_credential(self, api_key: str):
        key = (api_key or "").strip()
        if not key:
            raise ConfigurationError("API key must not be empty")
        self.settings.set(API_KEY_SETTING, key)
        self._install(key)

    def clear_credential(self):
        self.settings.delete(API_KEY_SETTING)
        self._install(None)

    def _install(self, api_key: Optional[str]):
        """Swap the solver for a new credential. Any scan in flight becomes stale."""
        solver = None
        key = (api_key or "").strip()
        if key:
            try:
                solver = self.solver_factory(key)
            except ConfigurationError as e:
                self.status.log(f"scheduler: {e}")
        # swap in one step: a scan never sees a half-installed credential
        self._solver = solver
        self._epoch += 1

        if self._state.phase is ScanPhase.SCANNING:
            # the running scan settles the phase when it finishes
            self.status.log(f"scheduler: credential changed mid-scan (epoch={self._epoch})")
            return
        if self._solver is not None:
            self.status.log(f"scheduler: armed, next scan in {self.interval}s")
            self._transition(ScanPhase.ARMED, time_left=self.interval)
        else:
            self.status.log("scheduler: idle, setup required")
            self._transition(ScanPhase.IDLE, time_left=self.interval)

    # ── events ─────────────────────────────────────────────────────────────

    async def tick(self):
        if self._state.phase is not ScanPhase.ARMED:
            return
        left = max(self._state.time_left - 1, 0)
        self._transition(time_left=left)
        if left == 0:
            await self._scan("auto")

    async def trigger(self) -> Optional[str]:
        """Manual scan. Returns None if a scan ran, else the error code for why not."""
        phase = self._state.phase
        if phase is ScanPhase.IDLE:
            self.status.log("scheduler: manual scan ignored, setup required")
            return errors.ERR_SETUP_REQUIRED
        if phase is ScanPhase.SCANNING:
            self.status.log("scheduler: manual scan dropped, already scanning")
            return errors.ERR_BUSY
        await self._scan("manual")
        return None

    # ── scan ───────────────────────────────────────────────────────────────

    async def _scan(self, source: str):
        epoch, solver = self._epoch, self._solver
        self._transition(ScanPhase.SCANNING)
        self._in_flight += 1
        self.status.log(f"scheduler: scan start ({source})")
        try:
            frame = self._capture()
            result = await solver.solve(frame)
            self._reconcile(epoch, result)
        except CaptureUnavailable as e:
            self.status.log(f"scheduler: {e}, retrying next cycle")
        except StaleResponse as e:
            self.status.log(f"scheduler: discarded result, {e}")
        except Exception as e:
            # solve() must not raise; keep the loop alive if one does
            self.status.log(f"scheduler: solver raised {type(e).__name__}: {e}")
            if epoch == self._epoch:
                self._transition(last_error=str(e) or type(e).__name__)
        finally:
            self._in_flight -= 1
            phase = ScanPhase.ARMED if self._solver is not None else ScanPhase.IDLE
            self._transition(phase, time_left=self.interval, scans=self._state.scans + 1)

    def _capture(self) -> Frame:
        frame = self.camera.capture_bytes()
        if not frame:
            raise CaptureUnavailable("no frame from camera")
        return frame

    def _reconcile(self, epoch: int, result: SolveResult):
        if epoch != self._epoch:
            raise StaleResponse(f"credential epoch {epoch} superseded by {self._epoch}")
        if result.ok:
            self.status.log(f"scheduler: answer {result.answer}")
            self._transition(last_result=result, last_error=None)
        elif result.error:
            self.status.log(f"scheduler: inference failed: {result.error}")
            self._transition(last_error=result.error)
        else:
            self.status.log("scheduler: no question detected, keeping last answer")

    # ── loop ───────────────────────────────────────────────────────────────

    async def run(self):
        """Tick once per second until stop(). Blocks while a scan is in flight."""
        if self._stopping is None:
            self._stopping = asyncio.Event()
        self.status.log(f"scheduler: loop started (interval={self.interval}s)")
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=TICK_S)
            except asyncio.TimeoutError:
                await self.tick()
        self.status.log("scheduler: loop stopped")

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._stopping = asyncio.Event()
            self._task = asyncio.create_task(self.run())
        return self._task

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def stop(self):
        if self._stopping is not None:
            self._stopping.set()
        if self._task is not None:
            await self._task
            self._task = None
        self._stopping = None
