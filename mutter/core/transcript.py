"""Immutable transcript dataclasses and their text, WebVTT, SRT, and JSON renderings.

WHY: The engine hands back loose segment and token data in its own units.
Callers want one object they can keep after the model is gone, share
between threads, and render in whichever subtitle format they need.

HOW: Two frozen dataclasses:
  Utterance  — one segment or one word with start/stop in centiseconds
  Transcript — processing time, segment utterances, optional word utterances
Rendering methods are pure reads over the tuples. format_timestamp()
converts engine centiseconds into subtitle timecodes.

RULES:
- Timestamps are integer centiseconds (whisper.cpp's native unit)
- Rendered text is stripped; "-->" inside cue text becomes "->"
- WebVTT uses "." as the decimal marker, SRT uses ","; hours always shown
- Negative timestamps and stop < start raise ValueError when rendered
- word_utterances is None unless word timestamps were requested
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Iterable, Optional, Tuple

_MS_PER_HOUR = 3_600_000
_MS_PER_MINUTE = 60_000
_MS_PER_SECOND = 1_000

# whisper.cpp reports t0/t1 in hundredths of a second.
_MS_PER_CENTISECOND = 10

_CUE_ARROW = "-->"
_SAFE_ARROW = "->"


def format_timestamp(num: int, always_include_hours: bool, decimal_marker: str) -> str:
    """Format a centisecond timestamp as ``[HH:]MM:SS<marker>mmm``.

    WHY: Subtitle formats count milliseconds, the engine counts
    centiseconds. WebVTT and SRT differ only in the decimal marker.

    HOW: Multiply by 10 to get milliseconds, then peel off hours,
    minutes, and seconds by floor division.

    RULES:
    - num must be >= 0; negative input raises ValueError
    - "HH:" is emitted when always_include_hours is set or hours != 0
    - Minutes and seconds are zero-padded to 2 digits, milliseconds to 3
    """
    if num < 0:
        raise ValueError(f"non-negative timestamp expected, got {num}")

    milliseconds = num * _MS_PER_CENTISECOND

    hours, milliseconds = divmod(milliseconds, _MS_PER_HOUR)
    minutes, milliseconds = divmod(milliseconds, _MS_PER_MINUTE)
    seconds, milliseconds = divmod(milliseconds, _MS_PER_SECOND)

    hours_marker = f"{hours:02d}:" if always_include_hours or hours != 0 else ""
    return f"{hours_marker}{minutes:02d}:{seconds:02d}{decimal_marker}{milliseconds:03d}"


def _cue_text(text: str) -> str:
    return text.strip().replace(_CUE_ARROW, _SAFE_ARROW)


def _cue_span(utterance: Utterance, decimal_marker: str) -> str:
    if utterance.stop < utterance.start:
        raise ValueError(
            f"utterance ends before it starts: start={utterance.start}, stop={utterance.stop}"
        )
    return "{} --> {}".format(
        format_timestamp(utterance.start, True, decimal_marker),
        format_timestamp(utterance.stop, True, decimal_marker),
    )


@dataclass(frozen=True)
class Utterance:
    """A span of recognized speech: a whole segment or a single word.

    RULES:
    - start / stop: integer centiseconds from the start of the audio
    - text: raw engine text, leading space included
    - start >= 0 and stop >= start are checked when rendered to VTT or
      SRT (ValueError), not at construction
    """

    start: int
    stop: int
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start, "stop": self.stop, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Utterance:
        return cls(start=int(data["start"]), stop=int(data["stop"]), text=str(data["text"]))


@dataclass(frozen=True)
class Transcript:
    """The complete result of one transcription call.

    WHY: Built once, atomically, when transcription finishes. Because it
    is frozen and holds tuples, it outlives the model and the sample
    buffer and can be read from any thread without locking.

    HOW: The orchestrator fills utterances from engine segments and,
    when asked for word timestamps, word_utterances from engine tokens.

    RULES:
    - utterances: segment order as produced by the engine
    - word_utterances: None unless word timestamps were requested
    - processing_time: wall-clock time spent inside the engine call
    """

    processing_time: timedelta
    utterances: Tuple[Utterance, ...]
    word_utterances: Optional[Tuple[Utterance, ...]] = None

    def __post_init__(self) -> None:
        # Accept any iterable but always store tuples so the instance stays immutable.
        object.__setattr__(self, "utterances", tuple(self.utterances))
        if self.word_utterances is not None:
            object.__setattr__(self, "word_utterances", tuple(self.word_utterances))

    # ------------------------------------------------------------------
    # Renderings
    # ------------------------------------------------------------------

    def as_text(self) -> str:
        """Each segment's stripped text on its own line, no timestamps."""
        return "".join(f"{utterance.text.strip()}\n" for utterance in self.utterances)

    def as_vtt(self, words: bool = False) -> str:
        """Render as a WebVTT document.

        Args:
            words: Render word_utterances instead of segments.

        Returns:
            ``"WEBVTT\\n"`` followed by one blank-line-terminated cue per
            utterance.
        """
        cues = "".join(
            "{}\n{}\n\n".format(_cue_span(utterance, "."), _cue_text(utterance.text))
            for utterance in self._select(words)
        )
        return f"WEBVTT\n{cues}"

    def as_srt(self, words: bool = False) -> str:
        """Render as SubRip cues numbered from 1.

        Args:
            words: Render word_utterances instead of segments.
        """
        return "".join(
            "{}\n{}\n{}\n".format(index, _cue_span(utterance, ","), _cue_text(utterance.text))
            for index, utterance in enumerate(self._select(words), start=1)
        )

    def _select(self, words: bool) -> Tuple[Utterance, ...]:
        if not words:
            return self.utterances
        if self.word_utterances is None:
            raise ValueError(
                "Transcript has no word timestamps; transcribe with word_timestamps=True."
            )
        return self.word_utterances

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form. processing_time is stored as float seconds."""
        return {
            "processing_time": self.processing_time.total_seconds(),
            "utterances": [u.to_dict() for u in self.utterances],
            "word_utterances": (
                None
                if self.word_utterances is None
                else [u.to_dict() for u in self.word_utterances]
            ),
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Transcript:
        words = data.get("word_utterances")
        return cls(
            processing_time=timedelta(seconds=float(data["processing_time"])),
            utterances=_utterances(data["utterances"]),
            word_utterances=None if words is None else _utterances(words),
        )

    @classmethod
    def from_json(cls, text: str) -> Transcript:
        return cls.from_dict(json.loads(text))


def _utterances(items: Iterable[dict[str, Any]]) -> Tuple[Utterance, ...]:
    return tuple(Utterance.from_dict(item) for item in items)
