from enum import Enum

class SessionStage(str, Enum):
    """
    Top-level phase of an interview session.
    SETUP -> QUESTIONING -> CODING -> RESULTS, and RESULTS -> SETUP on restart.
    """
    SETUP = "SETUP"
    QUESTIONING = "QUESTIONING"
    CODING = "CODING"
    RESULTS = "RESULTS"

class QuestionMode(str, Enum):
    """
    How the question set is obtained.
    DYNAMIC requires the setup intake, FIXED skips it.
    """
    DYNAMIC = "DYNAMIC"
    FIXED = "FIXED"

class SessionAction(str, Enum):
    """
    User-triggered operations. Used for guarding and outcome reporting.
    """
    START = "START"
    SETUP = "SETUP"
    START_RECORDING = "START_RECORDING"
    STOP_RECORDING = "STOP_RECORDING"
    RECORD_RESPONSE = "RECORD_RESPONSE"
    NEXT = "NEXT"
    PREVIOUS = "PREVIOUS"
    SUBMIT = "SUBMIT"
    REFETCH_PROMPT = "REFETCH_PROMPT"
    SUBMIT_CODE = "SUBMIT_CODE"
    RESTART = "RESTART"

class ScoreBand(str, Enum):
    GOOD = "GOOD"    # >= 80
    FAIR = "FAIR"    # >= 60
    POOR = "POOR"

def score_band(score: float) -> ScoreBand:
    if score >= 80:
        return ScoreBand.GOOD
    if score >= 60:
        return ScoreBand.FAIR
    return ScoreBand.POOR
