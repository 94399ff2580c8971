"""
Solver adapters turn one camera frame into a SolveResult.

Every adapter's solve() is a coroutine that never raises: failures come back
as SolveResult(found=False, error=...). Answer letters are normalized here,
never by the scheduler.
"""
import base64
import json
import re
from urllib.parse import unquote_to_bytes
from exammega.orchestrator.contracts import SolveResult, Frame, ANSWER_LETTERS
from exammega.orchestrator.errors import InferenceFailure

DEFAULT_MIME = "image/jpeg"

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
# "2", "B", "b)", "(4)", "Option C"
_ANSWER = re.compile(r"^(?:option\s*)?\(?\s*([A-Ea-e1-5])\s*[).:]?$", re.IGNORECASE)


class SolverAdapter:
    async def solve(self, frame: Frame) -> SolveResult:
        """Return SolveResult for one encoded frame. Must not raise."""
        raise NotImplementedError


def split_frame(frame: Frame) -> tuple[str, str]:
    """
    Return (base64 payload, mime type) with any data-URI header removed.
    Percent-encoded (non-base64) data URIs are decoded and re-encoded as base64.
    """
    if isinstance(frame, (bytes, bytearray)):
        return base64.standard_b64encode(bytes(frame)).decode("ascii"), DEFAULT_MIME
    text = frame.strip()
    if text[:5].lower() != "data:":
        return text, DEFAULT_MIME

    header, sep, payload = text[5:].partition(",")
    if not sep:
        raise InferenceFailure("malformed data URI: no ',' after header")
    params = header.split(";")
    mime = params[0].strip().lower() if "/" in params[0] else DEFAULT_MIME
    if params[-1].strip().lower() == "base64":
        return payload, mime
    raw = unquote_to_bytes(payload)
    return base64.standard_b64encode(raw).decode("ascii"), mime


def normalize_answer(value) -> str | None:
    """Map an option label to A–E. Numeric labels 1–5 become A–E."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return ANSWER_LETTERS[value - 1] if 1 <= value <= 5 else None
    if not isinstance(value, str):
        return None
    m = _ANSWER.match(value.strip())
    if not m:
        return None
    label = m.group(1).upper()
    if label.isdigit():
        return ANSWER_LETTERS[int(label) - 1]
    return label


def strip_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def parse_reply(text: str) -> SolveResult:
    """
    Parse the service's reply into a SolveResult.
    Raises InferenceFailure when the reply is not the expected JSON object.
    """
    cleaned = strip_fences(text or "")
    if not cleaned:
        raise InferenceFailure("empty reply")
    try:
        obj = json.loads(cleaned)
    except ValueError:
        # tolerate chatter around the object
        m = re.search(r"\{.*\}", cleaned, re.DOTALL)
        if not m:
            raise InferenceFailure(f"reply is not JSON: {cleaned[:80]!r}")
        try:
            obj = json.loads(m.group(0))
        except ValueError as e:
            raise InferenceFailure(f"malformed JSON: {e}") from e

    if not isinstance(obj, dict):
        raise InferenceFailure(f"expected a JSON object, got {type(obj).__name__}")
    found = obj.get("found")
    if not isinstance(found, bool):
        raise InferenceFailure("missing boolean 'found'")
    if not found:
        return SolveResult(found=False)

    answer = normalize_answer(obj.get("answer"))
    if answer is None:
        raise InferenceFailure(f"invalid answer {obj.get('answer')!r}")
    explanation = obj.get("explanation")
    if not isinstance(explanation, str) or not explanation.strip():
        raise InferenceFailure("missing 'explanation'")
    return SolveResult(found=True, answer=answer, explanation=explanation.strip())
