"""Model acquisition over HTTPS with a strict Content-Length contract.

WHY: GGML weight files are hundreds of megabytes to several gigabytes. A
connection that drops halfway must never produce a "model" the engine
then chokes on, so every download is checked byte-for-byte against the
length the server declared.

HOW: fetch_model_bytes() streams the file with httpx, requires a
Content-Length header, allocates a buffer of exactly that size, and fills
it from the raw (still encoded) stream. download_model() adds an on-disk cache and writes
through a temporary file so a crash never leaves a partial model behind.

RULES:
- Missing or unparsable Content-Length → DownloadError
- Raw stream shorter or longer than declared → DownloadError
- gzip/deflate bodies are decoded after the length check; other encodings → DownloadError
- Non-2xx status and transport errors → DownloadError (chained)
- Local write failures → ModelIOError
- A declared size far from the catalog estimate is only logged
- Nothing is retried here
"""

from __future__ import annotations

import logging
import os
import tempfile
import zlib
from collections.abc import Callable
from pathlib import Path
from typing import Optional, Union

import httpx

from mutter.config import DOWNLOAD_TIMEOUT_S, MODEL_BASE_URL, MODEL_CACHE_DIR
from mutter.errors import DownloadError, ModelIOError
from mutter.hub.catalog import ModelType

logger = logging.getLogger(__name__)

# Declared sizes outside [estimate / 2, estimate * 2] get a warning.
_SIZE_TOLERANCE_FACTOR = 2.0

_CONNECT_TIMEOUT_S = 30.0

# Content-Length counts encoded bytes; ask for none so the model arrives as-is.
_IDENTITY_HEADERS = {"Accept-Encoding": "identity"}


def _content_length(resp: httpx.Response, url: str) -> int:
    raw = resp.headers.get("Content-Length")
    if raw is None:
        raise DownloadError(f"Response for {url} has no Content-Length header")
    try:
        length = int(raw)
    except ValueError:
        raise DownloadError(
            f"Response for {url} has an invalid Content-Length header: {raw!r}"
        ) from None
    if length < 0:
        raise DownloadError(f"Response for {url} has a negative Content-Length: {length}")
    return length


def _check_expected_size(model_type: ModelType, length: int) -> None:
    expected = model_type.approx_size_bytes
    if not expected / _SIZE_TOLERANCE_FACTOR <= length <= expected * _SIZE_TOLERANCE_FACTOR:
        logger.warning(
            "Model %s declares %d bytes, expected about %d",
            model_type, length, expected,
        )


def _read_exact(resp: httpx.Response, length: int, url: str) -> bytearray:
    buffer = bytearray(length)
    received = 0
    for chunk in resp.iter_raw():
        end = received + len(chunk)
        if end > length:
            raise DownloadError(
                f"Download of {url} exceeded the declared {length} bytes"
            )
        buffer[received:end] = chunk
        received = end

    if received != length:
        raise DownloadError(
            f"Download of {url} ended early: received {received} of {length} bytes"
        )
    return buffer


def _decode_content(data: bytearray, encoding: Optional[str], url: str) -> bytearray:
    """Undo a Content-Encoding the server applied despite the identity request."""
    encoding = (encoding or "").strip().lower()
    if encoding in ("", "identity"):
        return data

    logger.warning("Server sent %s-encoded model from %s", encoding, url)
    try:
        if encoding in ("gzip", "x-gzip"):
            return bytearray(zlib.decompress(data, 16 + zlib.MAX_WBITS))
        if encoding == "deflate":
            try:
                return bytearray(zlib.decompress(data))
            except zlib.error:
                return bytearray(zlib.decompress(data, -zlib.MAX_WBITS))
    except zlib.error as exc:
        raise DownloadError(f"Could not decode {encoding} response from {url}: {exc}") from exc
    raise DownloadError(f"Unsupported Content-Encoding {encoding!r} for {url}")


def fetch_model_bytes(
    model_type: ModelType,
    *,
    client: Optional[httpx.Client] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    on_status: Optional[Callable[[str], None]] = None,
) -> bytearray:
    """Download a model's weight file into memory.

    Args:
        model_type: Which model to fetch.
        client: Optional httpx.Client to reuse (tests pass one with a
            MockTransport). A private client is created and closed otherwise.
        base_url: Override for the model host; defaults to MODEL_BASE_URL.
        timeout: Read timeout in seconds; defaults to DOWNLOAD_TIMEOUT_S.
        on_status: Optional callback for human-readable progress messages.

    Returns:
        A buffer holding exactly Content-Length bytes.

    Raises:
        DownloadError: On any network, HTTP, or length failure.
    """
    url = model_type.url_for(base_url or MODEL_BASE_URL)
    logger.debug("Downloading model %s from %s", model_type, url)
    if on_status:
        on_status(f"Downloading model {model_type}...")

    owns_client = client is None
    http = client or httpx.Client(
        timeout=httpx.Timeout(timeout or DOWNLOAD_TIMEOUT_S, connect=_CONNECT_TIMEOUT_S),
    )
    try:
        with http.stream("GET", url, headers=_IDENTITY_HEADERS, follow_redirects=True) as resp:
            if not resp.is_success:
                raise DownloadError(
                    f"Model download failed with HTTP {resp.status_code}: {url}"
                )
            length = _content_length(resp, url)
            logger.debug("Model length: %d", length)
            _check_expected_size(model_type, length)
            data = _read_exact(resp, length, url)
            data = _decode_content(data, resp.headers.get("Content-Encoding"), url)
    except httpx.HTTPError as exc:
        raise DownloadError(f"Failed to download {url}: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    logger.info("Downloaded model: %s (%d bytes)", model_type, length)
    if on_status:
        on_status(f"Downloaded model {model_type} ({length / 1_000_000:.0f} MB).")
    return data


def cached_model_path(model_type: ModelType, cache_dir: Union[str, Path, None] = None) -> Path:
    directory = Path(cache_dir) if cache_dir is not None else MODEL_CACHE_DIR
    return directory / model_type.filename


def download_model(
    model_type: ModelType,
    *,
    cache_dir: Union[str, Path, None] = None,
    force: bool = False,
    client: Optional[httpx.Client] = None,
    base_url: Optional[str] = None,
    on_status: Optional[Callable[[str], None]] = None,
) -> Path:
    """Return a local path to the model, downloading it if not cached.

    WHY: Re-downloading gigabytes on every run is not acceptable for a CLI.

    HOW: Looks for ggml-<slug>.bin in the cache directory. If absent (or
    force is set), fetches it with fetch_model_bytes() and writes it to a
    ".part" file in the same directory before renaming it into place.

    RULES:
    - A file present in the cache is trusted (it was written atomically)
    - The cache directory is created on demand
    - Partial files are removed on failure

    Raises:
        DownloadError: If fetching fails.
        ModelIOError: If the file cannot be written.
    """
    target = cached_model_path(model_type, cache_dir)
    if target.is_file() and not force:
        logger.debug("Using cached model %s", target)
        return target

    data = fetch_model_bytes(
        model_type,
        client=client,
        base_url=base_url,
        on_status=on_status,
    )

    tmp_name: Optional[str] = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=target.name, suffix=".part")
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as exc:
        raise ModelIOError(f"Failed to write model to {target}: {exc}") from exc
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)

    logger.info("Saved model %s to %s", model_type, target)
    return target
