"""Tests for the whisper.cpp engine adapter.

WHY: The adapter translates InferenceConfig into pywhispercpp keyword
arguments and reads per-token timing out of the whisper.cpp context.
Both are easy to break silently when the bindings change.

HOW: _import_pywhispercpp is monkeypatched to return fake modules, so
these tests exercise the adapter logic without the native library.
"""

import os
from types import SimpleNamespace

import numpy as np
import pytest

from mutter.core.orchestrator import build_inference_config, transcribe
from mutter.engine import whisper_cpp
from mutter.engine.whisper_cpp import WhisperCppEngine
from mutter.errors import EngineError


class FakeWhisperModel:
    """Stand-in for pywhispercpp.model.Model."""

    instances = []

    def __init__(self, model_path, **params):
        self.model_path = model_path
        self.params = params
        with open(model_path, "rb") as f:
            self.file_bytes = f.read()
        self.transcribe_calls = []
        self.segments = [
            SimpleNamespace(t0=0, t1=150, text=" hello world"),
            SimpleNamespace(t0=150, t1=300, text=" again"),
        ]
        self.error = None
        self._ctx = object()
        FakeWhisperModel.instances.append(self)

    def transcribe(self, media, **params):
        self.transcribe_calls.append((media, params))
        if self.error is not None:
            raise self.error
        return self.segments


def _fake_bindings(tokens_by_segment, fail=False):
    def n_tokens(ctx, segment):
        if fail:
            raise RuntimeError("context released")
        return len(tokens_by_segment[segment])

    def token_text(ctx, segment, token):
        return tokens_by_segment[segment][token][0]

    def token_data(ctx, segment, token):
        _, t0, t1 = tokens_by_segment[segment][token]
        return SimpleNamespace(t0=t0, t1=t1)

    return SimpleNamespace(
        whisper_full_n_tokens=n_tokens,
        whisper_full_get_token_text=token_text,
        whisper_full_get_token_data=token_data,
    )


TOKENS = [
    [("[_BEG_]", 0, 0), (" hello", 0, 70), (" world", 70, 150)],
    [(b" again", 150, 300)],
]


@pytest.fixture
def fake_pywhispercpp(monkeypatch):
    """Install fake pywhispercpp modules and return the bindings namespace."""
    FakeWhisperModel.instances = []
    bindings = _fake_bindings(TOKENS)
    model_module = SimpleNamespace(Model=FakeWhisperModel)
    monkeypatch.setattr(whisper_cpp, "_import_pywhispercpp", lambda: (model_module, bindings))
    return bindings


@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "ggml-tiny.en.bin"
    path.write_bytes(b"lmgg")
    return path


SAMPLES = np.zeros(1_600, dtype=np.float32)


class TestLoad:
    """Model loading."""

    def test_beam_search_strategy(self, fake_pywhispercpp, model_file):
        """Models are created for beam search sampling."""
        WhisperCppEngine().load(model_file)
        (model,) = FakeWhisperModel.instances
        assert model.model_path == str(model_file)
        assert model.params == {"params_sampling_strategy": 1}

    def test_missing_file(self, fake_pywhispercpp, tmp_path):
        """A missing file raises EngineError before the bindings are used."""
        with pytest.raises(EngineError, match="not found"):
            WhisperCppEngine().load(tmp_path / "absent.bin")
        assert FakeWhisperModel.instances == []

    def test_binding_failure_wrapped(self, monkeypatch, model_file):
        """Errors from the model constructor become EngineError."""

        def broken(*args, **kwargs):
            raise RuntimeError("invalid model data")

        monkeypatch.setattr(
            whisper_cpp,
            "_import_pywhispercpp",
            lambda: (SimpleNamespace(Model=broken), SimpleNamespace()),
        )
        with pytest.raises(EngineError, match="invalid model data"):
            WhisperCppEngine().load(model_file)

    def test_missing_dependency(self, monkeypatch, model_file):
        """Without pywhispercpp installed, loading explains how to install it."""

        def missing(name):
            raise ModuleNotFoundError(f"No module named '{name}'")

        monkeypatch.setattr(whisper_cpp, "import_module", missing)
        with pytest.raises(EngineError, match="whispercpp"):
            WhisperCppEngine().load(model_file)

    def test_load_from_bytes_removes_spool_file(self, fake_pywhispercpp):
        """The temporary model file is deleted once the model is loaded."""
        WhisperCppEngine().load_from_bytes(b"lmgg-weights")
        (model,) = FakeWhisperModel.instances
        spooled = model.model_path
        assert spooled.endswith(".bin")
        assert not os.path.exists(spooled)

    def test_load_from_bytearray(self, fake_pywhispercpp):
        """A bytearray buffer is spooled as-is."""
        WhisperCppEngine().load_from_bytes(bytearray(b"lmgg-weights"))
        (model,) = FakeWhisperModel.instances
        assert model.file_bytes == b"lmgg-weights"

    def test_load_from_empty_bytes(self, fake_pywhispercpp):
        """An empty buffer is rejected."""
        with pytest.raises(EngineError, match="empty"):
            WhisperCppEngine().load_from_bytes(b"")


class TestInfer:
    """Parameter mapping and result extraction."""

    def test_parameters(self, fake_pywhispercpp, model_file):
        """InferenceConfig maps onto whisper_full parameters."""
        handle = WhisperCppEngine().load(model_file)
        config = build_inference_config(translate=True, language="fr", threads=3)
        list(handle.infer(SAMPLES, config))

        (_, params) = FakeWhisperModel.instances[0].transcribe_calls[0]
        assert params == {
            "n_threads": 3,
            "translate": True,
            "language": "fr",
            "token_timestamps": False,
            "split_on_word": True,
            "print_special": False,
            "print_progress": False,
            "print_realtime": False,
            "print_timestamps": False,
            "beam_search": {"beam_size": 5, "patience": 1.0},
        }

    def test_auto_language_and_prompt(self, fake_pywhispercpp, model_file):
        """No language means auto-detection; a prompt is forwarded when set."""
        handle = WhisperCppEngine().load(model_file)
        config = build_inference_config(initial_prompt="Acme, Inc.", threads=1)
        list(handle.infer(SAMPLES, config))

        (_, params) = FakeWhisperModel.instances[0].transcribe_calls[0]
        assert params["language"] == "auto"
        assert params["initial_prompt"] == "Acme, Inc."

    def test_samples_passed_as_float32(self, fake_pywhispercpp, model_file):
        """The engine receives a contiguous float32 array."""
        handle = WhisperCppEngine().load(model_file)
        list(handle.infer(SAMPLES.astype(np.float64), build_inference_config(threads=1)))
        (media, _) = FakeWhisperModel.instances[0].transcribe_calls[0]
        assert media.dtype == np.float32
        assert media.flags["C_CONTIGUOUS"]

    def test_segments_without_tokens(self, fake_pywhispercpp, model_file):
        """Segments carry no tokens when word timestamps are off."""
        handle = WhisperCppEngine().load(model_file)
        segments = list(handle.infer(SAMPLES, build_inference_config(threads=1)))
        assert [(s.start, s.stop, s.text) for s in segments] == [
            (0, 150, " hello world"),
            (150, 300, " again"),
        ]
        assert all(s.tokens is None for s in segments)

    def test_tokens_extracted(self, fake_pywhispercpp, model_file):
        """Token text and timing are read per segment; bytes are decoded."""
        handle = WhisperCppEngine().load(model_file)
        config = build_inference_config(word_timestamps=True, threads=1)
        segments = list(handle.infer(SAMPLES, config))
        assert [(t.text, t.start, t.stop) for t in segments[0].tokens] == [
            ("[_BEG_]", 0, 0),
            (" hello", 0, 70),
            (" world", 70, 150),
        ]
        assert segments[1].tokens[0].text == " again"

    def test_transcribe_failure_wrapped(self, fake_pywhispercpp, model_file):
        """A failing whisper_full call raises EngineError immediately."""
        handle = WhisperCppEngine().load(model_file)
        FakeWhisperModel.instances[0].error = RuntimeError("whisper_full failed")
        with pytest.raises(EngineError, match="whisper_full failed"):
            handle.infer(SAMPLES, build_inference_config(threads=1))

    def test_token_failure_wrapped(self, monkeypatch, model_file):
        """Token accessor failures surface as EngineError while iterating."""
        bindings = _fake_bindings(TOKENS, fail=True)
        monkeypatch.setattr(
            whisper_cpp,
            "_import_pywhispercpp",
            lambda: (SimpleNamespace(Model=FakeWhisperModel), bindings),
        )
        handle = WhisperCppEngine().load(model_file)
        config = build_inference_config(word_timestamps=True, threads=1)
        with pytest.raises(EngineError, match="context released"):
            list(handle.infer(SAMPLES, config))


class TestEndToEnd:
    """Adapter and orchestrator together."""

    def test_word_subtitles(self, fake_pywhispercpp, model_file):
        """Special tokens are filtered and word cues rendered."""
        handle = WhisperCppEngine().load(model_file)
        transcript = transcribe(handle, SAMPLES, word_timestamps=True, threads=1)
        assert transcript.as_text() == "hello world\nagain\n"
        assert transcript.as_srt(words=True) == (
            "1\n00:00:00,000 --> 00:00:00,700\nhello\n"
            "2\n00:00:00,700 --> 00:00:01,500\nworld\n"
            "3\n00:00:01,500 --> 00:00:03,000\nagain\n"
        )
