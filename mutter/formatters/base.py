"""Formatter interface shared by every transcript output format.

WHY: The CLI writes text, WebVTT, SRT and JSON from one Transcript. It
should loop over formatters without knowing what each one produces.

HOW: A formatter exposes a display ``name`` and turns a Transcript into
a list of FormatterOutput records. Each record carries a file suffix,
the rendered text, and its MIME type.

RULES:
- One formatter may return several files (segment and word subtitles)
- ``suffix`` includes the extension and any qualifier, e.g. ``"-words.srt"``
- Formatters never write to disk; the caller chooses the path
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from mutter.core.transcript import Transcript


@dataclass
class FormatterOutput:
    """A rendered file waiting to be saved.

    Attributes:
        suffix: Appended to the input file's stem,
                e.g. ``".vtt"`` turns ``talk.mp3`` into ``talk.vtt``.
        content: Rendered text, saved as UTF-8.
        media_type: MIME type, e.g. ``"text/vtt"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Base class for output formats.

    New formats subclass this, implement ``name`` and ``format()``, and
    get a key in ``mutter.formatters.FORMATTERS``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name used in status messages, e.g. 'WebVTT'."""

    @abstractmethod
    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        """Render the transcript into one or more files."""
