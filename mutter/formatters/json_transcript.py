"""JSON transcript formatter.

WHY: Downstream tools (search indexes, editors, re-renderers) need the
full transcript with raw centisecond timing, not just subtitle text.

HOW: Serializes Transcript.to_dict() with a trailing newline. The
document shape is described by transcript.schema.json next to this file.

RULES:
- Output suffix: ".json"; media type: "application/json"
- processing_time is float seconds; start/stop stay integer centiseconds
- word_utterances is null when word timestamps were not requested
- Non-ASCII text is written as-is (UTF-8)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from mutter.core.transcript import Transcript
from mutter.formatters.base import BaseFormatter, FormatterOutput

SCHEMA_PATH = Path(__file__).resolve().parent / "transcript.schema.json"


class JSONFormatter(BaseFormatter):
    """Formatter that produces a single JSON transcript document."""

    @property
    def name(self) -> str:
        return "JSON"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        content = json.dumps(transcript.to_dict(), indent=2, ensure_ascii=False) + "\n"
        return [
            FormatterOutput(
                suffix=".json",
                content=content,
                media_type="application/json",
            )
        ]
