"""Plain text transcript formatter: one line per segment, no timecodes."""

from __future__ import annotations

from typing import List

from mutter.core.transcript import Transcript
from mutter.formatters.base import BaseFormatter, FormatterOutput


class PlainTextFormatter(BaseFormatter):
    """Formatter that writes Transcript.as_text() to a .txt file."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=".txt",
                content=transcript.as_text(),
                media_type="text/plain",
            )
        ]
