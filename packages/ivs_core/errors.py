from typing import Optional, Dict, Any

class IVSBaseError(Exception):
    """
    Top-level exception for the IVS project.
    Every custom exception must inherit from this class.

    Attributes:
        code (str): Error identifier (e.g. 'MISSING_RESPONSE')
        message (str): Human readable message
        details (Optional[Dict[str, Any]]): Extra debugging information
    """
    code = "IVS_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None
    ):
        if code:
            self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{self.code}] {message}")

class ConfigurationError(IVSBaseError):
    """Raised when loading or validating settings fails."""
    code = "CONF_ERROR"

# --- Capture ---

class DeviceUnavailable(IVSBaseError):
    """Capture device access was denied or the device could not be acquired."""
    code = "DEVICE_UNAVAILABLE"

# --- Gating / validation ---

class MissingResponse(IVSBaseError):
    """No recorded response exists for the question being left."""
    code = "MISSING_RESPONSE"

class InvalidSetupInput(IVSBaseError):
    code = "INVALID_SETUP_INPUT"

class EmptyCodeSubmission(IVSBaseError):
    code = "EMPTY_CODE"

class InvalidAction(IVSBaseError):
    """
    The operation is not valid in the current stage.
    Contract error: the UI should have disabled the action.
    """
    code = "INVALID_ACTION"

class ActionInProgress(IVSBaseError):
    """Another collaborator call is still outstanding for this session."""
    code = "ACTION_IN_PROGRESS"

class SessionNotFound(IVSBaseError):
    code = "SESSION_NOT_FOUND"

# --- Transcoding ---

class EncodingFailed(IVSBaseError):
    code = "ENCODING_FAILED"

# --- Collaborator round trips ---

class GenerationFailed(IVSBaseError):
    code = "GENERATION_FAILED"

class SubmissionFailed(IVSBaseError):
    code = "SUBMISSION_FAILED"

class FetchFailed(IVSBaseError):
    code = "FETCH_FAILED"

class EvaluationFailed(IVSBaseError):
    code = "EVALUATION_FAILED"
