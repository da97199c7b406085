"""Configuration constants, environment overrides, and .env loading.

WHY: Centralizes every tunable value (model host, cache directory, default
model, timeouts, accepted file types) so they are easy to find and
override without touching logic.

HOW: python-dotenv loads the .env file on import. Constants are plain
module-level values read from the environment with defaults. Values that
depend on the host (thread count) are functions resolved at call time.

RULES:
- All defaults can be overridden via MUTTER_* environment variables
- Host-derived values are never cached at import time
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Model acquisition
# ---------------------------------------------------------------------------

CANONICAL_MODEL_BASE_URL = "https://huggingface.co/ggerganov/whisper.cpp/resolve/main"

MODEL_BASE_URL = os.getenv("MUTTER_MODEL_BASE_URL", CANONICAL_MODEL_BASE_URL).rstrip("/")
MODEL_CACHE_DIR = Path(
    os.getenv("MUTTER_MODEL_DIR", str(Path.home() / ".cache" / "mutter"))
).expanduser()
DEFAULT_MODEL = os.getenv("MUTTER_DEFAULT_MODEL", "base.en")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number (seconds).") from exc


DOWNLOAD_TIMEOUT_S = _float_env("MUTTER_DOWNLOAD_TIMEOUT", 60.0)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("MUTTER_LOG_LEVEL", "WARNING").upper()

# ---------------------------------------------------------------------------
# Supported input files
# ---------------------------------------------------------------------------

SUPPORTED_AUDIO_FORMATS: set[str] = {
    ".mp3", ".wav", ".ogg", ".oga", ".flac",
    ".m4a", ".aac", ".mp4", ".webm",
}
"""Audio/video file extensions the CLI accepts (lowercase, with dot)."""


def default_thread_count() -> int:
    """Number of inference threads to use when the caller does not say.

    Resolved on every call from the host's logical CPU count, so tests and
    long-lived processes see the current value.
    """
    return os.cpu_count() or 1
