"""Model facade: load or download a model, then transcribe audio with it.

WHY: Most callers want three lines — get a model, hand it an MP3, print
the subtitles. This class hides the engine, the downloader, and the
orchestrator behind that shape.

HOW: Model wraps a ModelHandle produced by an Engine (whisper.cpp by
default). The classmethods cover the three ways to obtain one: a local
file, an in-memory buffer, or a catalog download. The transcribe methods
delegate to mutter.core.orchestrator.

RULES:
- The caller owns the Model; Transcripts it returns are independent of it
- load() checks the path exists before asking the engine
- download() caches on disk by default; cache=False keeps it in memory
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Optional, Union

import numpy as np

from mutter.core.orchestrator import transcribe, transcribe_audio
from mutter.core.transcript import Transcript
from mutter.engine.base import Engine, ModelHandle
from mutter.engine.whisper_cpp import WhisperCppEngine
from mutter.errors import EngineError
from mutter.hub.catalog import ModelType
from mutter.hub.download import download_model, fetch_model_bytes

logger = logging.getLogger(__name__)


def _default_engine() -> Engine:
    return WhisperCppEngine()


class Model:
    """A loaded speech-recognition model.

    Example::

        model = Model.download(ModelType.BASE_EN)
        transcript = model.transcribe_audio(Path("talk.mp3").read_bytes())
        print(transcript.as_srt())
    """

    def __init__(self, handle: ModelHandle) -> None:
        self._handle = handle

    @property
    def handle(self) -> ModelHandle:
        return self._handle

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Union[str, Path], engine: Optional[Engine] = None) -> Model:
        """Load a GGML model file.

        Raises:
            EngineError: If the path does not exist or the engine rejects it.
        """
        model_path = Path(path)
        logger.debug("Loading model %s", model_path)
        if not model_path.exists():
            raise EngineError(f"Model file not found: {model_path}")
        return cls((engine or _default_engine()).load(model_path))

    @classmethod
    def load_from_bytes(
        cls, data: Union[bytes, bytearray], engine: Optional[Engine] = None
    ) -> Model:
        """Load a GGML model held in memory. The buffer is passed on uncopied.

        Raises:
            EngineError: If the engine rejects the buffer.
        """
        return cls((engine or _default_engine()).load_from_bytes(data))

    @classmethod
    def download(
        cls,
        model_type: ModelType,
        engine: Optional[Engine] = None,
        *,
        cache: bool = True,
        cache_dir: Union[str, Path, None] = None,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> Model:
        """Download a catalog model (or reuse the cached copy) and load it.

        Raises:
            DownloadError: If the download fails or is truncated.
            ModelIOError: If the cached copy cannot be written.
            EngineError: If the downloaded model cannot be loaded.
        """
        if cache:
            path = download_model(model_type, cache_dir=cache_dir, on_status=on_status)
            return cls.load(path, engine=engine)

        data = fetch_model_bytes(model_type, on_status=on_status)
        return cls.load_from_bytes(data, engine=engine)

    # ------------------------------------------------------------------
    # Transcription
    # ------------------------------------------------------------------

    def transcribe_audio(
        self,
        audio: bytes,
        translate: bool = False,
        word_timestamps: bool = False,
        initial_prompt: Optional[str] = None,
        language: Optional[str] = None,
        threads: Optional[int] = None,
    ) -> Transcript:
        """Transcribe an audio file given as bytes (MP3, WAV, Ogg, FLAC, ...).

        Raises:
            AudioDecodeError: If the audio cannot be decoded.
            EngineError: If inference fails.
        """
        return transcribe_audio(
            self._handle,
            bytes(audio),
            translate=translate,
            word_timestamps=word_timestamps,
            initial_prompt=initial_prompt,
            language=language,
            threads=threads,
        )

    def transcribe_pcm_s16le(
        self,
        samples: np.ndarray,
        translate: bool = False,
        word_timestamps: bool = False,
        initial_prompt: Optional[str] = None,
        language: Optional[str] = None,
        threads: Optional[int] = None,
    ) -> Transcript:
        """Transcribe samples that are already 16 kHz mono float32.

        Use transcribe_audio() unless the audio has already been through
        mutter.audio.decode() or an equivalent conversion.
        """
        return transcribe(
            self._handle,
            samples,
            translate=translate,
            word_timestamps=word_timestamps,
            initial_prompt=initial_prompt,
            language=language,
            threads=threads,
        )
