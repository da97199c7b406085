"""Exception hierarchy for audio decoding, model loading, and acquisition.

WHY: Callers need to tell apart "this file is not audio", "the model could
not run", and "the model could not be fetched" without string matching.
A single root class lets the CLI catch everything the library raises on
purpose while letting genuine bugs surface.

HOW: MutterError is the root. AudioDecodeError covers the input side.
ModelError covers everything model-related and has three subclasses for
the engine, the network, and the local filesystem.

RULES:
- Every library failure derives from MutterError
- Wrapped failures always chain the original (``raise ... from exc``)
- Contract violations (negative timestamps, bad thread counts) are
  ValueError, not MutterError
"""

from __future__ import annotations


class MutterError(Exception):
    """Root of every error raised on purpose by this package."""


class AudioDecodeError(MutterError):
    """Raised when input bytes cannot be decoded into audio samples.

    WHY: Decoding is all-or-nothing. A caller handing us a PDF or a
    truncated MP3 gets one typed error instead of a half-filled buffer.

    HOW: Raised by decode() for unrecognized containers, decoder failures
    partway through the stream, and a missing ffmpeg executable.

    RULES:
    - Never carries partial samples
    - The message names the stage that failed
    """


class ModelError(MutterError):
    """Raised when a model cannot be acquired, loaded, or run."""


class EngineError(ModelError):
    """Raised when the inference engine fails to load a model or transcribe.

    WHY: The engine is an external native library with its own exception
    types (or none at all). Wrapping them keeps the rest of the package
    independent of the engine in use.

    HOW: Engine adapters raise it directly for missing files and missing
    dependencies; the orchestrator wraps any other exception escaping an
    engine call.

    RULES:
    - Fatal for the call that raised it; never retried
    """


class DownloadError(ModelError):
    """Raised when a model download fails or delivers the wrong size.

    WHY: A truncated weight file loads as garbage or crashes the engine.
    Acquisition must fail loudly rather than hand back a short buffer.

    HOW: Raised for transport errors, non-2xx responses, a missing or
    unparsable Content-Length header, and body/header length mismatches.

    RULES:
    - Not retried here; callers may retry acquisition themselves
    """


class ModelIOError(ModelError):
    """Raised when a downloaded model cannot be written to or read from disk."""
