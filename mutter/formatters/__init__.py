"""Registry of transcript output formats.

FORMATTERS maps the keys accepted by ``--formats`` to formatter classes.
Callers instantiate on use: ``FORMATTERS["vtt"]().format(transcript)``.
"""

from __future__ import annotations

from typing import Dict, Type

from mutter.formatters.base import BaseFormatter
from mutter.formatters.json_transcript import JSONFormatter
from mutter.formatters.plain_text import PlainTextFormatter
from mutter.formatters.subtitles import SRTFormatter, WebVTTFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "text": PlainTextFormatter,
    "vtt": WebVTTFormatter,
    "srt": SRTFormatter,
    "json": JSONFormatter,
}
