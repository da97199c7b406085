"""Audio decoding and normalization to whisper's input format."""

from mutter.audio.normalizer import TARGET_SAMPLE_RATE, decode, to_float_samples

__all__ = ["TARGET_SAMPLE_RATE", "decode", "to_float_samples"]
