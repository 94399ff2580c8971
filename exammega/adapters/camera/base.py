from abc import ABC, abstractmethod
from typing import Literal

Facing = Literal["environment", "user"]

class CameraAdapter(ABC):
    # capture hint only, the scheduler never reads it
    facing: Facing = "environment"

    @abstractmethod
    def capture_bytes(self) -> bytes | None:
        """Capture one frame. Returns JPEG bytes or None when no frame is ready."""
        ...
