ERR_SETUP_REQUIRED = "SETUP_REQUIRED"
ERR_CAPTURE_UNAVAILABLE = "CAPTURE_UNAVAILABLE"
ERR_INFERENCE = "INFERENCE_FAILURE"
ERR_STALE = "STALE_RESPONSE"
ERR_BUSY = "BUSY"


class ScanError(Exception):
    code = "UNKNOWN"


class ConfigurationError(ScanError):
    """Credential absent or empty — scheduler stays idle."""
    code = ERR_SETUP_REQUIRED


class CaptureUnavailable(ScanError):
    """Frame source returned no data (camera still initializing)."""
    code = ERR_CAPTURE_UNAVAILABLE


class InferenceFailure(ScanError):
    """Service call failed or its reply could not be parsed."""
    code = ERR_INFERENCE


class StaleResponse(ScanError):
    """Result arrived after its credential was replaced."""
    code = ERR_STALE
