"""
Gemini multiple-choice solver.
Calls the generateContent REST endpoint directly over httpx (async).

GEMINI_MODEL     model id (default gemini-1.5-flash)
GEMINI_BASE_URL  API root, override to point at scripts/fake_gemini_server.py
SOLVER_TIMEOUT_S per-call deadline in seconds (default 15); expiry is an error result
"""
import os
import httpx
from exammega.adapters.solver.base import SolverAdapter, split_frame, parse_reply
from exammega.orchestrator.contracts import SolveResult, Frame
from exammega.orchestrator.errors import ConfigurationError, InferenceFailure

GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
SOLVER_TIMEOUT_S = float(os.getenv("SOLVER_TIMEOUT_S", "15"))

PROMPT = (
    "You are an expert exam solver.\n"
    "Analyze the image provided. It may contain a multiple choice question.\n"
    "1. Identify the question and the choices.\n"
    "2. Solve the problem accurately.\n"
    "3. Return the correct option (A, B, C, D, or E). If the options are numbers "
    "(1, 2, 3, 4, 5), map them to A, B, C, D, E.\n"
    "4. Provide a very short, one-sentence explanation.\n\n"
    "Output strictly in JSON format, with no other text:\n"
    '{"found": boolean, "answer": "A" | "B" | "C" | "D" | "E", "explanation": "string"}\n\n'
    'If no question is visible, reply {"found": false}.'
)


class GeminiSolver(SolverAdapter):
    def __init__(self, status_store, api_key: str, model: str | None = None,
                 base_url: str | None = None, timeout: float | None = None,
                 transport: httpx.AsyncBaseTransport | None = None):
        if not api_key or not api_key.strip():
            raise ConfigurationError("Gemini API key is required")
        self.status = status_store
        self._api_key = api_key.strip()
        self.model = model or GEMINI_MODEL
        self.base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else SOLVER_TIMEOUT_S
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    def build_payload(self, frame: Frame) -> dict:
        data, mime = split_frame(frame)
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": PROMPT},
                        {"inline_data": {"mime_type": mime, "data": data}},
                    ],
                }
            ],
            "generationConfig": {"temperature": 0.2, "responseMimeType": "application/json"},
        }

    async def solve(self, frame: Frame) -> SolveResult:
        headers = {
            "x-goog-api-key": self._api_key,
            "Content-Type": "application/json",
        }
        try:
            payload = self.build_payload(frame)
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                resp = await client.post(self.url, json=payload, headers=headers)
            if not resp.is_success:
                raise InferenceFailure(f"HTTP {resp.status_code}: {resp.text[:200]}")
            raw = self._reply_text(resp.json())
            self.status.log(f"gemini_solver: raw={raw[:120]!r}")
            result = parse_reply(raw)
        except httpx.TimeoutException:
            self.status.log(f"gemini_solver: timed out after {self.timeout:.0f}s")
            return SolveResult(found=False, error=f"timed out after {self.timeout:.0f}s")
        except Exception as e:
            msg = str(e) or type(e).__name__
            self.status.log(f"gemini_solver: error {type(e).__name__}: {msg}")
            return SolveResult(found=False, error=msg)

        if result.found:
            self.status.log(f"gemini_solver: → {result.answer} ({result.explanation})")
        else:
            self.status.log("gemini_solver: no question in frame")
        return result

    def _reply_text(self, body: dict) -> str:
        candidates = body.get("candidates") or []
        if not candidates:
            reason = (body.get("promptFeedback") or {}).get("blockReason", "no candidates")
            raise InferenceFailure(f"empty response: {reason}")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
        if not text:
            raise InferenceFailure("response has no text part")
        return text
