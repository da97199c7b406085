"""Inference engine contract: configuration, raw output, and handle protocols.

WHY: Loading and running the speech model belongs to an external native
engine. Everything else in the package talks to it through this narrow
interface, so the orchestrator can be tested against a fake engine and
the real engine can be swapped without touching transcript code.

HOW: InferenceConfig carries every option the engine needs. Engines
implement Engine (load / load_from_bytes) and return a ModelHandle whose
infer() yields RawSegment objects, optionally with RawToken lists.

RULES:
- Timestamps on raw output are integer centiseconds
- RawSegment.tokens is None unless config.word_timestamps is set
- infer() may be lazy; extraction failures surface as EngineError while
  iterating
- Engines never print to the console; renderings are ours
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence, Union

import numpy as np

AudioBuffer = np.ndarray
"""Mono float32 samples at 16 kHz in [-1.0, 1.0)."""

BEAM_SIZE = 5
BEAM_PATIENCE = 1.0


@dataclass(frozen=True)
class InferenceConfig:
    """Options for a single inference call.

    RULES:
    - Built once per transcription call, never mutated
    - thread_count is already resolved (no None here)
    - Beam search is fixed at width 5, patience 1.0
    - split_on_word keeps segment boundaries on word edges
    """

    translate: bool
    word_timestamps: bool
    thread_count: int
    initial_prompt: Optional[str] = None
    language: Optional[str] = None
    beam_size: int = BEAM_SIZE
    patience: float = BEAM_PATIENCE
    split_on_word: bool = True
    print_special: bool = False
    print_progress: bool = False
    print_realtime: bool = False
    print_timestamps: bool = False


@dataclass(frozen=True)
class RawToken:
    text: str
    start: int
    stop: int


@dataclass(frozen=True)
class RawSegment:
    """One segment exactly as the engine reported it."""

    text: str
    start: int
    stop: int
    tokens: Optional[Sequence[RawToken]] = None


class ModelHandle(Protocol):
    """A loaded model instance owned by the caller."""

    def infer(self, samples: AudioBuffer, config: InferenceConfig) -> Iterable[RawSegment]:
        """Run inference over normalized samples and return raw segments."""
        ...


class Engine(Protocol):
    """Factory for model handles."""

    def load(self, path: Union[str, Path]) -> ModelHandle:
        """Load a model file; EngineError if missing or invalid."""
        ...

    def load_from_bytes(self, data: Union[bytes, bytearray]) -> ModelHandle:
        """Load a model held in memory; EngineError if invalid."""
        ...
