"""Command-line interface for mutter.

WHY: Most people want subtitles for one recording without writing any
Python. One command checks the input, fetches or opens a model,
transcribes, and writes every requested format next to the source.

HOW: Uses argparse to accept an input file, model selection, engine
options, output format selection, and output directory. Status messages
go to stderr; output files are saved next to the source (or to
--output-dir).

RULES:
- One positional argument: the recording to transcribe
- Validates file extension against SUPPORTED_AUDIO_FORMATS before loading a model
- --model-path (local GGML file) wins over --model (catalog download)
- --formats takes FORMATTERS keys separated by commas; all when omitted
- Output naming: {stem}{suffix}, numeric suffix for conflicts (talk-2.srt)
- Progress lines are printed to stderr so stdout stays clean
- Exit code 1 on any library or validation error, 130 on Ctrl-C
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from mutter.config import DEFAULT_MODEL, LOG_LEVEL, SUPPORTED_AUDIO_FORMATS
from mutter.errors import MutterError
from mutter.formatters import FORMATTERS
from mutter.formatters.base import FormatterOutput
from mutter.hub.catalog import ModelType
from mutter.model import Model


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed, so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, LOG_LEVEL, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Pick an output path that does not overwrite an earlier run.

    RULES:
    - First choice is {stem}{suffix}, e.g. talk.srt
    - Otherwise a counter from 2 goes right before the final extension:
      talk-2.srt, talk-words-2.srt, talk-words-3.srt
    """
    first_choice = output_dir / f"{stem}{suffix}"
    if not first_choice.exists():
        return first_choice

    qualifier, dot, extension = suffix.rpartition(".")
    if not dot:
        qualifier, extension = suffix, ""
    else:
        extension = dot + extension

    counter = 2
    while (output_dir / f"{stem}{qualifier}-{counter}{extension}").exists():
        counter += 1
    return output_dir / f"{stem}{qualifier}-{counter}{extension}"


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    """Write one formatter output as UTF-8 and return where it went."""
    target = _resolve_output_path(stem, output.suffix, output_dir)
    target.write_text(output.content, encoding="utf-8")
    return target


def _parse_formats(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(FORMATTERS.keys())

    format_keys = [f.strip() for f in raw.split(",") if f.strip()]
    for key in format_keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            _fail("Unknown format '{}'. Available formats: {}".format(key, available))
    return format_keys


def _load_model(args: argparse.Namespace) -> Model:
    if args.model_path:
        _status("Loading model {}...".format(args.model_path))
        return Model.load(args.model_path)

    model_type = ModelType.from_name(args.model)
    _status("Loading model {}...".format(model_type))
    return Model.download(model_type, cache_dir=args.model_dir, on_status=_status)


def _run_pipeline(args: argparse.Namespace) -> None:
    """Validate arguments, transcribe, and save every requested format.

    Everything that can be checked cheaply (input path, extension, output
    directory, format keys) is checked before a model is downloaded.
    """
    input_path = Path(args.input_file).resolve()

    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    ext = input_path.suffix.lower()
    if ext not in SUPPORTED_AUDIO_FORMATS:
        _fail(
            "Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_AUDIO_FORMATS))
            )
        )

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    format_keys = _parse_formats(args.formats)

    model = _load_model(args)

    _status("Transcribing {}...".format(input_path.name))
    transcript = model.transcribe_audio(
        input_path.read_bytes(),
        translate=args.translate,
        word_timestamps=args.word_timestamps,
        initial_prompt=args.prompt,
        language=args.language,
        threads=args.threads,
    )
    _status("  {} segments in {:.1f}s".format(
        len(transcript.utterances),
        transcript.processing_time.total_seconds(),
    ))

    _status("Formatting output...")
    stem = input_path.stem
    saved_files: List[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key]()
        _status("  Running {} formatter...".format(formatter.name))
        for output in formatter.format(transcript):
            saved_path = _save_output(output, stem, output_dir)
            saved_files.append(saved_path)
            _status("  Saved: {}".format(saved_path.name))

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser; separate from main() for testing."""
    parser = argparse.ArgumentParser(
        prog="mutter",
        description="Transcribe audio/video files with a local whisper.cpp model "
                    "and write plain text, WebVTT, SRT and JSON transcripts.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the audio or video file to transcribe.",
    )

    parser.add_argument(
        "--model",
        default=DEFAULT_MODEL,
        help="Catalog model to download/use (default: %(default)s). "
             "Available: {}.".format(", ".join(m.value for m in ModelType)),
    )

    parser.add_argument(
        "--model-path",
        default=None,
        help="Path to a local GGML model file (overrides --model).",
    )

    parser.add_argument(
        "--model-dir",
        default=None,
        help="Directory for downloaded models (default: MUTTER_MODEL_DIR or ~/.cache/mutter).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    parser.add_argument(
        "--translate",
        action="store_true",
        help="Translate speech to English instead of transcribing it.",
    )

    parser.add_argument(
        "--word-timestamps",
        action="store_true",
        help="Also produce per-word subtitle files.",
    )

    parser.add_argument(
        "--prompt",
        default=None,
        help="Initial prompt to condition the model (names, spelling, style).",
    )

    parser.add_argument(
        "--language",
        default=None,
        help="Spoken language code, e.g. 'en' (default: auto-detect).",
    )

    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Number of inference threads (default: number of CPUs).",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Run the CLI. argv defaults to sys.argv[1:]."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        _run_pipeline(args)
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (MutterError, ValueError) as e:
        _fail(str(e))


if __name__ == "__main__":
    main()
