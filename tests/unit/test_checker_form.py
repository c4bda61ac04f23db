import json

import pytest

from assessment.models import StudyLevel
from audio.recorder import Recording
from audio.validation import AudioTooLong, AudioTooShort, UnsupportedAudioType
from checker_client.audio_input import prepare_file, prepare_recording, prepare_upload
from checker_client.form import CheckForm, QuestionRequired
from config.presets import Presets


def _probe(seconds):
    return lambda data, suffix: seconds


def test_switching_question_type_clears_question():
    form = CheckForm(question="Something I typed")
    form.set_question_type(custom=False)
    assert form.question == ""
    assert form.custom_question is False


def test_choose_preset():
    form = CheckForm()
    assert form.choose_preset(Presets(), 2) == "Tell me about yourself."
    assert form.custom_question is False


@pytest.mark.parametrize("question", ["", "   "])
def test_question_is_required(question):
    form = CheckForm(question=question)
    with pytest.raises(QuestionRequired, match="Please enter a question or select a preset question"):
        form.validate_question()


def test_submission_fields():
    form = CheckForm(question="  Describe your school.  ", study_level=StudyLevel.FIVE_UNITS)
    form.set_weight("Grammar", 3)
    audio = prepare_upload(b"ID3", "answer.mp3", "audio/mpeg", probe=_probe(45))
    submission = form.submission(audio)
    assert submission.question == "Describe your school."
    assert submission.study_level == "5 Units"
    weights = {item["name"]: item["weight"] for item in json.loads(submission.criteria)}
    assert weights == {"Vocabulary": 1, "Clarity": 1, "Fluency": 1, "Grammar": 3}
    assert submission.filename == "answer.mp3"


def test_upload_accepts_mp3_inside_window():
    audio = prepare_upload(b"ID3", "answer.mp3", probe=_probe(20))
    assert audio.content_type == "audio/mpeg"
    assert audio.duration == 20


@pytest.mark.parametrize("seconds,error", [(19.9, AudioTooShort), (90.1, AudioTooLong), (None, AudioTooShort)])
def test_upload_duration_rejected(seconds, error):
    with pytest.raises(error):
        prepare_upload(b"ID3", "answer.mp3", "audio/mpeg", probe=_probe(seconds))


def test_upload_type_checked_before_probe():
    def probe(data, suffix):
        raise AssertionError("probe should not run")

    with pytest.raises(UnsupportedAudioType):
        prepare_upload(b"RIFF", "answer.wav", "audio/wav", probe=probe)


def test_prepare_file_reads_from_disk(tmp_path):
    target = tmp_path / "speech.mp3"
    target.write_bytes(b"ID3-from-disk")
    audio = prepare_file(target, probe=_probe(30))
    assert audio.data == b"ID3-from-disk"
    assert audio.filename == "speech.mp3"


def test_recording_inside_window():
    recording = Recording(data=b"RIFF", duration=30)
    audio = prepare_recording(recording)
    assert audio.filename == "recording.wav"
    assert audio.content_type == "audio/wav"


def test_recording_too_long():
    with pytest.raises(AudioTooLong):
        prepare_recording(Recording(data=b"RIFF", duration=95))
