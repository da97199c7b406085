"""Transcript data model and transcription orchestration.

WHY: The core package holds the stable heart of the pipeline — the
Transcript dataclasses every renderer consumes and the orchestrator that
builds them from engine output.

HOW: transcript.py defines the data structures and renderings;
orchestrator.py builds the inference config, calls the engine, and maps
its output.

RULES:
- Transcript dataclasses are the contract — change with care
- Orchestration is engine-agnostic — it only sees mutter.engine.base
"""

from mutter.core.transcript import Transcript, Utterance, format_timestamp

__all__ = ["Transcript", "Utterance", "format_timestamp"]
