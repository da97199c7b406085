"""Audio normalization: any supported audio file to 16 kHz mono float32.

WHY: whisper.cpp only accepts single-channel 16 kHz float samples scaled
exactly like its own int16 conversion. Real input arrives as MP3, WAV,
Ogg, FLAC, or video containers at arbitrary rates and channel counts.

HOW: pydub (ffmpeg underneath) decodes the bytes, converts to 16-bit,
downmixes to mono, and resamples to 16 kHz. scipy then band-limits the
signal to speech frequencies with second-order Butterworth low-pass
(3 kHz) and high-pass (200 Hz) sections. The result is rounded back into
the int16 range and scaled by 1/32768.

RULES:
- Output is a 1-D float32 numpy array in [-1.0, 1.0)
- PCM WAV is parsed without ffmpeg; every other format needs ffmpeg
- Decoding is all-or-nothing: any failure raises AudioDecodeError
- A WAV whose data chunk is shorter than its header says is a failure
- ffmpeg runs with -xerror, so a decoder error fails the whole file
- Zero-length audio yields an empty array
"""

from __future__ import annotations

import io
import logging
import struct
from typing import Optional

import numpy as np
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError
from scipy.signal import butter, sosfilt

from mutter.errors import AudioDecodeError

logger = logging.getLogger(__name__)

TARGET_SAMPLE_RATE = 16_000
TARGET_CHANNELS = 1
SAMPLE_WIDTH_BYTES = 2

LOW_PASS_CUTOFF_HZ = 3_000
HIGH_PASS_CUTOFF_HZ = 200
FILTER_ORDER = 2

INT16_MIN = -32768
INT16_MAX = 32767
INT16_SCALE = 32768.0

_RIFF_HEADER_SIZE = 12
_CHUNK_HEADER_SIZE = 8
# Written by encoders that stream and never patch the size back in.
_WAV_STREAMING_SIZE = 0xFFFFFFFF

# Make ffmpeg exit non-zero on the first decoding error instead of
# skipping the damaged frames.
_FFMPEG_STRICT = ["-xerror"]


def _sniff_format(data: bytes) -> Optional[str]:
    """Guess the container from magic bytes so pydub can pick a decoder.

    Returns None when unknown; ffmpeg then detects the container itself.
    """
    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        return "wav"
    if data[:4] == b"fLaC":
        return "flac"
    if data[:4] == b"OggS":
        return "ogg"
    if data[:3] == b"ID3":
        return "mp3"
    # MPEG audio frame sync (11 bits) with a non-zero layer; ADTS AAC has layer 0.
    if len(data) > 1 and data[0] == 0xFF and data[1] & 0xE0 == 0xE0 and data[1] & 0x06:
        return "mp3"
    return None


def _check_wav_complete(data: bytes) -> None:
    """Raise AudioDecodeError if the WAV data chunk runs past the end of the file.

    pydub clamps a short data chunk to whatever bytes are present, which
    would return the first part of a cut-off recording as if it were all
    of it.
    """
    pos = _RIFF_HEADER_SIZE
    while pos + _CHUNK_HEADER_SIZE <= len(data):
        chunk_id = data[pos:pos + 4]
        (size,) = struct.unpack_from("<I", data, pos + 4)
        body_start = pos + _CHUNK_HEADER_SIZE
        if chunk_id == b"data":
            present = len(data) - body_start
            if size != _WAV_STREAMING_SIZE and size > present:
                raise AudioDecodeError(
                    f"WAV file is truncated: data chunk declares {size} bytes, {present} present"
                )
            return
        # Chunks are word-aligned.
        pos = body_start + size + (size & 1)


def _load_segment(data: bytes) -> AudioSegment:
    fmt = _sniff_format(data)
    if fmt == "wav":
        _check_wav_complete(data)
    logger.debug("Decoding %d bytes (format hint: %s)", len(data), fmt or "auto")
    try:
        return AudioSegment.from_file(io.BytesIO(data), format=fmt, parameters=_FFMPEG_STRICT)
    except CouldntDecodeError as exc:
        raise AudioDecodeError(f"Could not decode audio: {exc}") from exc
    except FileNotFoundError as exc:
        raise AudioDecodeError(
            "ffmpeg executable not found while decoding audio. "
            "Install ffmpeg or provide PCM WAV input."
        ) from exc
    except Exception as exc:
        raise AudioDecodeError(f"Audio decoder failed: {exc}") from exc


def _band_limit(samples: np.ndarray, sample_rate: int) -> np.ndarray:
    """Low-pass then high-pass the signal to keep the speech band."""
    low_pass = butter(FILTER_ORDER, LOW_PASS_CUTOFF_HZ, btype="lowpass", fs=sample_rate, output="sos")
    high_pass = butter(FILTER_ORDER, HIGH_PASS_CUTOFF_HZ, btype="highpass", fs=sample_rate, output="sos")
    return sosfilt(high_pass, sosfilt(low_pass, samples))


def to_float_samples(pcm: np.ndarray) -> np.ndarray:
    """Scale int16 PCM to float32 the way whisper.cpp does (x / 32768)."""
    return pcm.astype(np.float32) / np.float32(INT16_SCALE)


def decode(data: bytes) -> np.ndarray:
    """Decode an audio file held in memory into whisper-ready samples.

    WHY: The engine's accuracy depends on getting rate, channel count and
    scaling exactly right; doing it in one place keeps callers honest.

    HOW: Decode with pydub, normalize width/channels/rate, filter in
    float64 with scipy, round and clip to int16, then scale to float32.

    RULES:
    - Input must be a complete file, not a stream fragment
    - Output rate is always 16 kHz, mono

    Args:
        data: Raw bytes of an MP3, WAV, Ogg/Vorbis, FLAC or other
            ffmpeg-readable file.

    Returns:
        1-D float32 array of samples.

    Raises:
        AudioDecodeError: If the bytes cannot be decoded.
    """
    if not data:
        raise AudioDecodeError("Audio buffer is empty.")

    segment = _load_segment(bytes(data))
    try:
        segment = (
            segment.set_sample_width(SAMPLE_WIDTH_BYTES)
            .set_channels(TARGET_CHANNELS)
            .set_frame_rate(TARGET_SAMPLE_RATE)
        )
    except Exception as exc:
        raise AudioDecodeError(f"Audio conversion failed: {exc}") from exc

    pcm = np.frombuffer(segment.raw_data, dtype=np.int16)
    if pcm.size == 0:
        logger.debug("Decoded audio is empty")
        return np.zeros(0, dtype=np.float32)

    filtered = _band_limit(pcm.astype(np.float64), TARGET_SAMPLE_RATE)
    quantized = np.clip(np.rint(filtered), INT16_MIN, INT16_MAX).astype(np.int16)

    logger.debug("Decoded %d samples (%.2fs)", quantized.size, quantized.size / TARGET_SAMPLE_RATE)
    return to_float_samples(quantized)
