"""mutter — whisper.cpp transcription with subtitle-ready output.

WHY: Turning an MP3 into subtitles with a local whisper model takes
several fiddly steps: fetch the right weight file, convert the audio to
exactly what the engine expects, drive the engine with sane parameters,
and convert centisecond timing into subtitle timecodes. This package
does all of it behind a small API.

HOW: Four stages — acquire (hub), normalize (audio), transcribe (core
orchestrator over an engine), render (Transcript methods and pluggable
formatters). Each stage is independently testable; the engine sits
behind a protocol so tests run without native code.

RULES:
- All renderings consume the same immutable Transcript
- Adding an output format = one new formatter module, no core changes
- The engine contract (mutter.engine.base) is the only place that knows
  what the engine returns
"""

from mutter.audio import decode
from mutter.core import Transcript, Utterance, format_timestamp
from mutter.errors import (
    AudioDecodeError,
    DownloadError,
    EngineError,
    ModelError,
    ModelIOError,
    MutterError,
)
from mutter.hub import ModelType
from mutter.model import Model

__version__ = "0.1.0"

__all__ = [
    "AudioDecodeError",
    "DownloadError",
    "EngineError",
    "Model",
    "ModelError",
    "ModelIOError",
    "ModelType",
    "MutterError",
    "Transcript",
    "Utterance",
    "decode",
    "format_timestamp",
]
