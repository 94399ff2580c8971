"""Mock camera: serves a random JPEG from MOCK_FRAMES_DIR for offline runs."""
import os
import random
from pathlib import Path
from exammega.adapters.camera.base import CameraAdapter, Facing

FRAMES_DIR = Path(os.getenv("MOCK_FRAMES_DIR", str(Path(__file__).parent / "frames")))

class MockCamera(CameraAdapter):
    def __init__(self, status_store, frames_dir: Path | None = None, facing: Facing = "environment"):
        self.status = status_store
        self.frames_dir = Path(frames_dir) if frames_dir is not None else FRAMES_DIR
        self.facing = facing

    def capture_bytes(self) -> bytes | None:
        jpegs = sorted(self.frames_dir.glob("*.jpg"))
        if not jpegs:
            self.status.log(f"mock_camera: no frames in {self.frames_dir}")
            return None
        chosen = random.choice(jpegs)
        self.status.log(f"mock_camera: serving {chosen.name}")
        return chosen.read_bytes()
