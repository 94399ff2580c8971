from pydantic import BaseModel
from typing import Literal, Optional

class SolveOut(BaseModel):
    found: bool
    answer: Optional[Literal["A", "B", "C", "D", "E"]] = None
    explanation: Optional[str] = None

class StatusResponse(BaseModel):
    phase: Literal["idle", "armed", "scanning"]
    is_scanning: bool
    time_left: int
    interval: int
    setup_required: bool           # no API key yet: UI shows the setup prompt
    result: Optional[SolveOut] = None
    last_error: Optional[str] = None
    scans: int = 0
    logs: list[str]

class ScanResponse(BaseModel):
    ok: bool
    error: Optional[str] = None    # BUSY | SETUP_REQUIRED
    result: Optional[SolveOut] = None
    time_left: int

class ApiKeyRequest(BaseModel):
    api_key: str

class ApiKeyResponse(BaseModel):
    ok: bool
    configured: bool
    error: Optional[str] = None
