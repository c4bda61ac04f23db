"""Client side of the English check: form state, audio checks and submission."""
from .audio_input import PreparedAudio, prepare_file, prepare_recording, prepare_upload
from .form import CheckForm, QuestionRequired
from .session import ProcessingTimeout, SubmissionClient, SubmissionError

__all__ = [
    "CheckForm",
    "PreparedAudio",
    "ProcessingTimeout",
    "QuestionRequired",
    "SubmissionClient",
    "SubmissionError",
    "prepare_file",
    "prepare_recording",
    "prepare_upload",
]
