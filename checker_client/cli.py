"""Command line front-end: submit a recording and print or export the assessment."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from assessment.pdf import generate_assessment_pdf
from assessment.results import build_result_view, render_text
from assessment.models import StudyLevel
from audio.recorder import MicrophoneUnavailable, Recorder, Recording
from audio.validation import AudioValidationError, format_clock
from config.presets import load_presets
from config.settings import settings
from observability import configure_logging

from .audio_input import PreparedAudio, prepare_file, prepare_recording
from .form import CheckForm, QuestionRequired
from .session import SubmissionClient, SubmissionError


def _parse_weight(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"Expected NAME=WEIGHT, got '{raw}'")
    return name.strip(), value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="english-check", description="Check spoken English with AI")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    submit = sub.add_parser("submit", help="Submit a recording for assessment")
    question = submit.add_mutually_exclusive_group()
    question.add_argument("--question", help="Custom question that was asked")
    question.add_argument("--preset", type=int, help="1-based preset question number")
    source = submit.add_mutually_exclusive_group(required=True)
    source.add_argument("--audio", type=Path, help="MP3 file to upload")
    source.add_argument("--record", action="store_true", help="Record from the microphone (Ctrl+C stops)")
    submit.add_argument(
        "--level",
        choices=[level.value for level in StudyLevel],
        default=StudyLevel.THREE_UNITS.value,
    )
    submit.add_argument("--weight", action="append", type=_parse_weight, default=[], metavar="NAME=WEIGHT")
    submit.add_argument("--transcode", action="store_true", help="Convert to MP3 before upload")
    submit.add_argument("--proxy-url", default=None)
    submit.add_argument("--webhook-url", default=None)
    submit.add_argument("--json", action="store_true", help="Print the raw assessment JSON")
    submit.add_argument("--pdf", type=Path, help="Also write a PDF report to this path")

    sub.add_parser("presets", help="List preset questions and default criteria")
    return parser


def _record(transcode: bool) -> PreparedAudio:
    recorder = Recorder(min_duration=settings.MIN_DURATION_S, max_duration=settings.MAX_DURATION_S)
    recorder.start()
    print(f"Recording... press Ctrl+C to stop (max {format_clock(settings.MAX_DURATION_S)})", file=sys.stderr)
    try:
        while recorder.tick():
            left = recorder.seconds_left()
            if left is not None:
                print(f"Recording will stop in {left} seconds", file=sys.stderr)
    except KeyboardInterrupt:
        pass
    recording: Recording = recorder.stop()
    return prepare_recording(
        recording,
        min_duration=settings.MIN_DURATION_S,
        max_duration=settings.MAX_DURATION_S,
        transcode=transcode,
    )


def _build_form(args: argparse.Namespace) -> CheckForm:
    presets = load_presets()
    form = CheckForm(study_level=StudyLevel(args.level), criteria=presets.criteria)
    if args.preset is not None:
        form.choose_preset(presets, args.preset)
    else:
        form.question = args.question or ""
    for name, value in args.weight:
        form.set_weight(name, value)
    form.validate_question()
    return form


def _submit(args: argparse.Namespace) -> int:
    form = _build_form(args)
    if args.record:
        audio = _record(args.transcode)
    else:
        audio = prepare_file(
            args.audio,
            min_duration=settings.MIN_DURATION_S,
            max_duration=settings.MAX_DURATION_S,
            transcode=args.transcode,
        )
    if audio.warning:
        print(f"Warning: {audio.warning}", file=sys.stderr)

    with SubmissionClient(args.proxy_url, args.webhook_url) as client:
        result = client.submit(form, audio)

    payload = result.model_dump(by_alias=True, exclude_none=True)
    view = build_result_view(payload, question=form.question)
    if args.json or view is None:
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(render_text(view), end="")
    if args.pdf is not None:
        if view is None:
            print("No per-criterion assessment to export", file=sys.stderr)
        else:
            args.pdf.write_bytes(generate_assessment_pdf(view))
            print(f"PDF report written to {args.pdf}", file=sys.stderr)
    return 0


def _presets() -> int:
    presets = load_presets()
    print("Preset questions:")
    for index, question in enumerate(presets.questions, start=1):
        print(f"  {index}. {question}")
    print("Study levels: " + ", ".join(level.value for level in presets.study_levels))
    print("Criteria:")
    for criterion in presets.criteria:
        print(f"  {criterion.name} (weight {criterion.weight}): {criterion.description}")
    print(f"Duration: {settings.MIN_DURATION_S}-{settings.MAX_DURATION_S} seconds")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.log_level)
    if args.command == "presets":
        return _presets()
    try:
        return _submit(args)
    except (QuestionRequired, AudioValidationError, MicrophoneUnavailable, SubmissionError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (KeyError, IndexError) as exc:
        print(f"Error: {exc.args[0] if exc.args else exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
