"""Inference engine contract and the whisper.cpp implementation."""

from mutter.engine.base import (
    AudioBuffer,
    Engine,
    InferenceConfig,
    ModelHandle,
    RawSegment,
    RawToken,
)
from mutter.engine.whisper_cpp import WhisperCppEngine

__all__ = [
    "AudioBuffer",
    "Engine",
    "InferenceConfig",
    "ModelHandle",
    "RawSegment",
    "RawToken",
    "WhisperCppEngine",
]
