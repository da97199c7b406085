"""WebVTT and SubRip subtitle formatters.

WHY: Players and editors consume WebVTT (browsers, HLS) and SRT (desktop
players, NLEs). Both are rendered by the Transcript itself; these
formatters decide which files to produce and how to name them.

HOW: Each formatter emits the segment-level document. When the
transcript carries word utterances it also emits a word-level document
with a "-words" suffix, one cue per word.

RULES:
- Segment file first, word file second (when present)
- WebVTT media type: "text/vtt"; SRT media type: "application/x-subrip"
- Never modifies the Transcript
"""

from __future__ import annotations

from typing import List

from mutter.core.transcript import Transcript
from mutter.formatters.base import BaseFormatter, FormatterOutput


class WebVTTFormatter(BaseFormatter):
    """Formatter that produces WebVTT cue files."""

    @property
    def name(self) -> str:
        return "WebVTT"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        outputs = [
            FormatterOutput(suffix=".vtt", content=transcript.as_vtt(), media_type="text/vtt"),
        ]
        if transcript.word_utterances is not None:
            outputs.append(
                FormatterOutput(
                    suffix="-words.vtt",
                    content=transcript.as_vtt(words=True),
                    media_type="text/vtt",
                )
            )
        return outputs


class SRTFormatter(BaseFormatter):
    """Formatter that produces SubRip (.srt) cue files."""

    @property
    def name(self) -> str:
        return "SRT"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        outputs = [
            FormatterOutput(
                suffix=".srt",
                content=transcript.as_srt(),
                media_type="application/x-subrip",
            ),
        ]
        if transcript.word_utterances is not None:
            outputs.append(
                FormatterOutput(
                    suffix="-words.srt",
                    content=transcript.as_srt(words=True),
                    media_type="application/x-subrip",
                )
            )
        return outputs
