"""Shared test fixtures for the mutter test suite.

WHY: Most modules need the same handful of inputs: a transcript with
known timing, an engine that returns scripted segments without native
code, and small WAV files generated on the fly.

HOW: FakeHandle implements the ModelHandle protocol over a list of
RawSegment objects and records every config it receives. FakeEngine
hands out FakeHandles and records what it was asked to load. WAV bytes
are produced with pydub's Sine generator and its built-in WAV writer, so
no ffmpeg is needed.

RULES:
- The sample transcript timing is in centiseconds, like engine output
- FakeHandle.infer() returns a lazy generator, like the real engine
"""

from __future__ import annotations

import io
from datetime import timedelta
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Union

import numpy as np
import pytest
from pydub import AudioSegment
from pydub.generators import Sine

from mutter.core.transcript import Transcript, Utterance
from mutter.engine.base import InferenceConfig, RawSegment, RawToken


class FakeHandle:
    """ModelHandle that replays scripted segments."""

    def __init__(
        self,
        segments: Sequence[RawSegment] = (),
        error: Optional[Exception] = None,
        fail_after: Optional[int] = None,
    ) -> None:
        self.segments = list(segments)
        self.error = error
        self.fail_after = fail_after
        self.calls: List[InferenceConfig] = []
        self.samples: List[np.ndarray] = []

    def infer(self, samples: np.ndarray, config: InferenceConfig) -> Iterator[RawSegment]:
        self.calls.append(config)
        self.samples.append(samples)
        if self.error is not None and self.fail_after is None:
            raise self.error
        return self._iterate()

    def _iterate(self) -> Iterator[RawSegment]:
        for index, segment in enumerate(self.segments):
            if self.fail_after is not None and index == self.fail_after:
                raise self.error
            yield segment


class FakeEngine:
    """Engine that records load requests and returns a fixed handle."""

    def __init__(self, handle: Optional[FakeHandle] = None) -> None:
        self.handle = handle or FakeHandle()
        self.loaded_paths: List[Path] = []
        self.loaded_buffers: List[Union[bytes, bytearray]] = []

    def load(self, path: Union[str, Path]) -> FakeHandle:
        self.loaded_paths.append(Path(path))
        return self.handle

    def load_from_bytes(self, data: Union[bytes, bytearray]) -> FakeHandle:
        self.loaded_buffers.append(data)
        return self.handle


# ---------------------------------------------------------------------------
# Engine output samples
# ---------------------------------------------------------------------------

HELLO_SEGMENT = RawSegment(text=" hello world ", start=0, stop=150)


@pytest.fixture
def hello_segment():
    """Single-segment engine output for the short greeting recording."""
    return HELLO_SEGMENT


@pytest.fixture
def segments_with_tokens():
    """Two segments whose tokens include whisper.cpp special markers."""
    return [
        RawSegment(
            text=" And so my fellow Americans,",
            start=0,
            stop=320,
            tokens=[
                RawToken(text="[_BEG_]", start=0, stop=0),
                RawToken(text=" And", start=0, stop=40),
                RawToken(text=" so", start=40, stop=80),
                RawToken(text=" my", start=80, stop=120),
                RawToken(text=" fellow", start=120, stop=200),
                RawToken(text=" Americans,", start=200, stop=320),
                RawToken(text="[_TT_160]", start=320, stop=320),
            ],
        ),
        RawSegment(
            text=" ask not",
            start=320,
            stop=410,
            tokens=[
                RawToken(text=" ask", start=320, stop=370),
                RawToken(text=" not", start=370, stop=410),
                RawToken(text="[_TT_205]", start=410, stop=410),
            ],
        ),
    ]


@pytest.fixture
def sample_transcript():
    """Transcript with two segments, three words, and a cue arrow in the text."""
    return Transcript(
        processing_time=timedelta(seconds=1.25),
        utterances=(
            Utterance(start=0, stop=150, text=" hello world "),
            Utterance(start=150, stop=372_345, text=" a --> b "),
        ),
        word_utterances=(
            Utterance(start=0, stop=70, text=" hello"),
            Utterance(start=70, stop=150, text=" world"),
            Utterance(start=150, stop=200, text=" a"),
        ),
    )


@pytest.fixture
def segment_only_transcript():
    """Transcript produced without word timestamps."""
    return Transcript(
        processing_time=timedelta(seconds=0.5),
        utterances=(Utterance(start=0, stop=150, text=" hello world "),),
    )


# ---------------------------------------------------------------------------
# Audio samples
# ---------------------------------------------------------------------------


def _wav_bytes(segment: AudioSegment) -> bytes:
    buf = io.BytesIO()
    segment.export(buf, format="wav")
    return buf.getvalue()


@pytest.fixture
def make_tone_wav() -> Callable[..., bytes]:
    """Factory producing in-memory PCM WAV files containing a sine tone."""

    def _make(
        frequency: float = 440.0,
        *,
        duration_ms: int = 1000,
        sample_rate: int = 44_100,
        channels: int = 1,
        volume_db: float = -6.0,
    ) -> bytes:
        tone = Sine(frequency, sample_rate=sample_rate, bit_depth=16).to_audio_segment(
            duration=duration_ms, volume=volume_db
        )
        if channels != 1:
            tone = tone.set_channels(channels)
        return _wav_bytes(tone)

    return _make


@pytest.fixture
def make_handle():
    """Factory for FakeHandle instances."""
    return FakeHandle


@pytest.fixture
def make_engine():
    """Factory for FakeEngine instances."""
    return FakeEngine
