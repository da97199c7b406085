"""Model catalog and HTTPS acquisition of whisper.cpp weight files.

WHY: Models live on the whisper.cpp Hugging Face repository. Callers pick
one by name and get a verified local copy (or an in-memory buffer).

HOW: catalog.py maps model names to file names, URLs, and sizes;
download.py fetches with httpx and enforces the Content-Length contract.

RULES:
- All HTTP calls go through mutter.hub.download (no direct httpx usage elsewhere)
"""

from mutter.hub.catalog import ModelType
from mutter.hub.download import cached_model_path, download_model, fetch_model_bytes

__all__ = ["ModelType", "cached_model_path", "download_model", "fetch_model_bytes"]
