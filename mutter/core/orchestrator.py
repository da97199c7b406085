"""Transcription orchestration: inference config, engine call, transcript assembly.

WHY: The engine speaks in raw segments and tokens and needs a precise
parameter set (beam search, no console output, word-edge splitting).
Callers want to pass a handful of options and get a Transcript back.

HOW: build_inference_config() resolves caller options into an immutable
InferenceConfig. transcribe() calls the handle, times the call, and maps
segments into utterances and tokens into word utterances, dropping
engine-internal special tokens. transcribe_audio() decodes first.

RULES:
- Beam search width 5, patience 1.0, split_on_word on, printing off
- Thread count defaults to the host's logical CPU count, per call
- Tokens whose text starts with "[_" never reach word_utterances
- word_utterances is None when word timestamps were not requested
- Engine failures propagate as EngineError; nothing is retried
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Callable, List, Optional

from mutter.audio.normalizer import decode
from mutter.config import default_thread_count
from mutter.core.transcript import Transcript, Utterance
from mutter.engine.base import AudioBuffer, InferenceConfig, ModelHandle
from mutter.errors import EngineError, ModelError

logger = logging.getLogger(__name__)

SPECIAL_TOKEN_PREFIX = "[_"
"""whisper.cpp marks non-speech tokens ([_BEG_], [_TT_150], ...) with this prefix."""


def build_inference_config(
    *,
    translate: bool = False,
    word_timestamps: bool = False,
    initial_prompt: Optional[str] = None,
    language: Optional[str] = None,
    threads: Optional[int] = None,
) -> InferenceConfig:
    """Resolve caller options into the engine configuration.

    Raises:
        ValueError: If threads is given and is less than 1.
    """
    if threads is None:
        thread_count = default_thread_count()
    elif threads < 1:
        raise ValueError(f"threads must be >= 1, got {threads}")
    else:
        thread_count = int(threads)

    logger.debug("Using %d threads", thread_count)
    return InferenceConfig(
        translate=translate,
        word_timestamps=word_timestamps,
        thread_count=thread_count,
        initial_prompt=initial_prompt,
        language=language,
    )


def transcribe(
    handle: ModelHandle,
    samples: AudioBuffer,
    *,
    translate: bool = False,
    word_timestamps: bool = False,
    initial_prompt: Optional[str] = None,
    language: Optional[str] = None,
    threads: Optional[int] = None,
    clock: Callable[[], float] = time.monotonic,
) -> Transcript:
    """Transcribe normalized samples with a loaded model.

    WHY: This is the single place where engine output becomes a
    Transcript, so filtering and timing rules live here only.

    HOW: Build the config, call handle.infer(), walk the returned
    segments (and their tokens when requested), then freeze everything
    into a Transcript with the measured elapsed time.

    RULES:
    - samples must already be 16 kHz mono float32 (see decode())
    - Segments are copied verbatim into utterances
    - Special "[_" tokens are skipped
    - Non-ModelError exceptions from the handle become EngineError

    Args:
        handle: Loaded model.
        samples: Normalized audio buffer.
        translate: Translate to English instead of transcribing.
        word_timestamps: Also collect per-token utterances.
        initial_prompt: Optional text to condition the decoder.
        language: Spoken language code, or None to auto-detect.
        threads: Engine worker threads, or None for the CPU count.
        clock: Monotonic time source (seconds).

    Returns:
        The finished Transcript.
    """
    config = build_inference_config(
        translate=translate,
        word_timestamps=word_timestamps,
        initial_prompt=initial_prompt,
        language=language,
        threads=threads,
    )
    logger.debug(
        "Transcribing %d samples with translate=%s and word_timestamps=%s",
        len(samples), translate, word_timestamps,
    )

    started = clock()
    utterances: List[Utterance] = []
    words: List[Utterance] = []
    try:
        for segment in handle.infer(samples, config):
            utterances.append(Utterance(start=segment.start, stop=segment.stop, text=segment.text))

            if not word_timestamps:
                continue

            for token in segment.tokens or ():
                if token.text.startswith(SPECIAL_TOKEN_PREFIX):
                    continue
                words.append(Utterance(start=token.start, stop=token.stop, text=token.text))
    except ModelError:
        raise
    except Exception as exc:
        raise EngineError(f"Transcription failed: {exc}") from exc
    elapsed = clock() - started

    logger.info(
        "Transcribed %d segments (%d words) in %.2fs",
        len(utterances), len(words), elapsed,
    )
    return Transcript(
        processing_time=timedelta(seconds=elapsed),
        utterances=tuple(utterances),
        word_utterances=tuple(words) if word_timestamps else None,
    )


def transcribe_audio(
    handle: ModelHandle,
    data: bytes,
    **options,
) -> Transcript:
    """Decode an audio file held in memory, then transcribe it.

    Accepts the same keyword options as transcribe().

    Raises:
        AudioDecodeError: If the bytes are not decodable audio.
        EngineError: If the engine fails.
    """
    logger.debug("Decoding audio.")
    samples = decode(data)
    return transcribe(handle, samples, **options)
