"""whisper.cpp engine adapter built on pywhispercpp.

WHY: GGML weight files from the whisper.cpp model repository are the
models this package downloads. pywhispercpp exposes the whisper.cpp
context and its full-result accessors, including per-token timing.

HOW: WhisperCppEngine loads a model file (or spooled bytes) into a
pywhispercpp Model configured for beam search. WhisperCppModel.infer()
translates InferenceConfig into whisper_full parameters, runs the model
eagerly, and returns a generator that pulls segment and token data out of
the whisper.cpp context.

RULES:
- pywhispercpp is an optional dependency, imported on first load
- Missing model files raise EngineError before touching the engine
- Any exception from the bindings is re-raised as EngineError
- Language None means whisper.cpp auto-detection ("auto")
"""

from __future__ import annotations

import logging
import os
import tempfile
from importlib import import_module
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Iterator, List, Sequence, Tuple, Union

import numpy as np

from mutter.engine.base import AudioBuffer, InferenceConfig, RawSegment, RawToken
from mutter.errors import EngineError

logger = logging.getLogger(__name__)

# pywhispercpp sampling strategy switch: 0 = greedy, 1 = beam search.
_BEAM_SEARCH_STRATEGY = 1

_AUTO_LANGUAGE = "auto"


def _import_pywhispercpp() -> Tuple[ModuleType, ModuleType]:
    """Return (pywhispercpp.model, _pywhispercpp bindings)."""
    try:
        model_module = import_module("pywhispercpp.model")
        bindings = import_module("_pywhispercpp")
    except ModuleNotFoundError as exc:
        raise EngineError(
            "whisper.cpp engine requires the optional dependency. "
            "Install it with: pip install 'mutter[whispercpp]'"
        ) from exc
    return model_module, bindings


def _transcribe_params(config: InferenceConfig) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "n_threads": config.thread_count,
        "translate": config.translate,
        "language": config.language or _AUTO_LANGUAGE,
        "token_timestamps": config.word_timestamps,
        "split_on_word": config.split_on_word,
        "print_special": config.print_special,
        "print_progress": config.print_progress,
        "print_realtime": config.print_realtime,
        "print_timestamps": config.print_timestamps,
        "beam_search": {"beam_size": config.beam_size, "patience": config.patience},
    }
    if config.initial_prompt is not None:
        params["initial_prompt"] = config.initial_prompt
    return params


def _token_text(raw: Union[str, bytes]) -> str:
    # Tokens can split a multi-byte character; keep what decodes.
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


class WhisperCppModel:
    """A loaded whisper.cpp context."""

    def __init__(self, model: Any, bindings: ModuleType) -> None:
        self._model = model
        self._bindings = bindings

    def infer(self, samples: AudioBuffer, config: InferenceConfig) -> Iterator[RawSegment]:
        params = _transcribe_params(config)
        audio = np.ascontiguousarray(samples, dtype=np.float32)
        logger.debug(
            "whisper.cpp: %d samples, threads=%d, translate=%s, word_timestamps=%s",
            audio.shape[0], config.thread_count, config.translate, config.word_timestamps,
        )
        try:
            segments = self._model.transcribe(audio, **params)
        except Exception as exc:
            raise EngineError(f"whisper.cpp inference failed: {exc}") from exc
        return self._iter_segments(segments, config.word_timestamps)

    def _iter_segments(self, segments: Sequence[Any], word_timestamps: bool) -> Iterator[RawSegment]:
        for index, segment in enumerate(segments):
            try:
                text = str(segment.text)
                start = int(segment.t0)
                stop = int(segment.t1)
            except (AttributeError, TypeError, ValueError) as exc:
                raise EngineError(f"whisper.cpp returned a malformed segment {index}: {exc}") from exc
            tokens = self._segment_tokens(index) if word_timestamps else None
            yield RawSegment(text=text, start=start, stop=stop, tokens=tokens)

    def _segment_tokens(self, segment_index: int) -> List[RawToken]:
        pw = self._bindings
        # pywhispercpp keeps the whisper_context private; the full-result
        # accessors need it directly.
        ctx = self._model._ctx
        tokens: List[RawToken] = []
        try:
            count = pw.whisper_full_n_tokens(ctx, segment_index)
            for token_index in range(count):
                text = pw.whisper_full_get_token_text(ctx, segment_index, token_index)
                data = pw.whisper_full_get_token_data(ctx, segment_index, token_index)
                tokens.append(RawToken(text=_token_text(text), start=int(data.t0), stop=int(data.t1)))
        except Exception as exc:
            raise EngineError(
                f"whisper.cpp failed reading tokens of segment {segment_index}: {exc}"
            ) from exc
        return tokens


class WhisperCppEngine:
    """Engine implementation backed by whisper.cpp via pywhispercpp."""

    name = "whisper.cpp"

    def load(self, path: Union[str, Path]) -> WhisperCppModel:
        model_path = Path(path)
        logger.debug("Loading model %s", model_path)
        if not model_path.is_file():
            raise EngineError(f"Model file not found: {model_path}")

        model_module, bindings = _import_pywhispercpp()
        try:
            model = model_module.Model(
                str(model_path),
                params_sampling_strategy=_BEAM_SEARCH_STRATEGY,
            )
        except Exception as exc:
            raise EngineError(f"Failed to load whisper.cpp model {model_path}: {exc}") from exc
        return WhisperCppModel(model, bindings)

    def load_from_bytes(self, data: Union[bytes, bytearray]) -> WhisperCppModel:
        """Load a GGML model held in memory.

        whisper.cpp reads the whole file into its own buffers at init, so
        the bytes are spooled to a temporary file that is removed right
        after loading.
        """
        if not data:
            raise EngineError("Model buffer is empty.")

        fd, tmp_name = tempfile.mkstemp(prefix="mutter-", suffix=".bin")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            return self.load(tmp_name)
        except OSError as exc:
            raise EngineError(f"Failed to spool model buffer: {exc}") from exc
        finally:
            try:
                os.remove(tmp_name)
            except OSError:
                logger.warning("Failed to remove temporary model file: %s", tmp_name)
