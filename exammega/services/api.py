import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from dotenv import load_dotenv
from exammega.services.models import (
    StatusResponse, SolveOut, ScanResponse, ApiKeyRequest, ApiKeyResponse,
)
from exammega.services.status_store import StatusStore
from exammega.orchestrator.contracts import SolveResult, SCAN_INTERVAL
from exammega.orchestrator.errors import ConfigurationError
from exammega.orchestrator.scheduler import ScanScheduler
from exammega.adapters.settings.base import API_KEY_SETTING
from exammega.adapters.settings.json_settings import JsonFileSettings

load_dotenv(dotenv_path="exammega/.env", override=False)

status = StatusStore()

# Camera adapter: CAMERA_ADAPTER = cv2 | mock (default: cv2)
camera_adapter = os.getenv("CAMERA_ADAPTER", "cv2").lower()
if camera_adapter == "mock":
    from exammega.adapters.camera.mock_camera import MockCamera
    camera = MockCamera(status)
else:
    try:
        from exammega.adapters.camera.cv2_camera import CV2Camera
        camera = CV2Camera(status)
    except ImportError:
        from exammega.adapters.camera.mock_camera import MockCamera
        camera = MockCamera(status)
        status.log("camera: MockCamera (opencv not installed)")
status.log(f"camera: {type(camera).__name__} facing={camera.facing}")

# Solver adapter: SOLVER_ADAPTER = gemini | mock (default: gemini)
solver_adapter = os.getenv("SOLVER_ADAPTER", "gemini").lower()

def make_solver(api_key: str):
    if solver_adapter == "mock":
        from exammega.adapters.solver.mock_solver import MockSolver
        return MockSolver(status, api_key=api_key)
    from exammega.adapters.solver.gemini_solver import GeminiSolver
    return GeminiSolver(status, api_key=api_key)

status.log(f"solver adapter: {solver_adapter}")

settings = JsonFileSettings(status)
# GEMINI_API_KEY seeds the store on first run; a key saved through the API wins
_env_key = os.getenv("GEMINI_API_KEY", "").strip()
if _env_key and not settings.get(API_KEY_SETTING):
    settings.set(API_KEY_SETTING, _env_key)
    status.log("settings: seeded API key from GEMINI_API_KEY")

interval = int(os.getenv("SCAN_INTERVAL_S", str(SCAN_INTERVAL)))
scheduler = ScanScheduler(camera=camera, settings=settings, solver_factory=make_solver,
                          status_store=status, interval=interval)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler.start()
    try:
        yield
    finally:
        await scheduler.stop()
        if hasattr(camera, "release"):
            camera.release()


app = FastAPI(title="exammega", lifespan=lifespan)


def _solve_out(result: SolveResult | None) -> SolveOut | None:
    if result is None:
        return None
    return SolveOut(found=result.found, answer=result.answer, explanation=result.explanation)


@app.get("/status", response_model=StatusResponse)
def get_status():
    s = status.scan
    return StatusResponse(
        phase=s.phase.value,
        is_scanning=s.is_scanning,
        time_left=s.time_left,
        interval=s.interval,
        setup_required=s.setup_required,
        result=_solve_out(s.last_result),
        last_error=s.last_error,
        scans=s.scans,
        logs=status.logs,
    )


@app.post("/scan", response_model=ScanResponse)
async def scan_now():
    """Manual trigger: scan immediately and restart the countdown.
    Dropped (ok=false, error=BUSY) while another scan is in flight.
    """
    err = await scheduler.trigger()
    s = status.scan
    return ScanResponse(ok=err is None, error=err, result=_solve_out(s.last_result), time_left=s.time_left)


# credential endpoints stay async so they run on the scheduler's event loop
@app.put("/settings/api_key", response_model=ApiKeyResponse)
async def set_api_key(req: ApiKeyRequest):
    try:
        scheduler.set_credential(req.api_key)
    except ConfigurationError as e:
        status.log(f"SETTINGS rejected: {e}")
        return ApiKeyResponse(ok=False, configured=scheduler.has_credential, error=e.code)
    status.log("SETTINGS: API key updated")
    return ApiKeyResponse(ok=True, configured=scheduler.has_credential)


@app.delete("/settings/api_key", response_model=ApiKeyResponse)
async def delete_api_key():
    scheduler.clear_credential()
    status.log("SETTINGS: API key removed")
    return ApiKeyResponse(ok=True, configured=False)


@app.get("/health")
def health():
    return {
        "api": True,
        "camera_adapter": type(camera).__name__,
        "solver_adapter": solver_adapter,
        "credential": scheduler.has_credential,
        "loop_running": scheduler.running,
        "all_ok": scheduler.has_credential,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
