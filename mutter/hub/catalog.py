"""Catalog of downloadable whisper.cpp GGML models.

WHY: Users pick a model by name ("base.en", "large-v3"). Each name must
resolve to exactly one weight file, its canonical download URL, and a
rough size so the downloader can sanity-check what arrives.

HOW: ModelType is a closed enum whose values are the model slugs.
Per-variant data lives in plain dicts keyed by every member, so a new
variant without a size entry fails the catalog test immediately.

RULES:
- URL template: <base>/ggml-<slug>.bin on the whisper.cpp Hugging Face repo
- ".en" variants are English-only; the rest are multilingual
- Sizes are approximate and used for warnings only
"""

from __future__ import annotations

import enum
from typing import Dict, Optional

from mutter.config import CANONICAL_MODEL_BASE_URL

_MB = 1_000_000


class ModelType(str, enum.Enum):
    """Named whisper model variants.

    Inherits from str so values print and parse as their slugs.
    """

    TINY_EN = "tiny.en"
    TINY = "tiny"
    BASE_EN = "base.en"
    BASE = "base"
    SMALL_EN = "small.en"
    SMALL = "small"
    MEDIUM_EN = "medium.en"
    MEDIUM = "medium"
    LARGE_V1 = "large-v1"
    LARGE_V2 = "large-v2"
    LARGE_V3 = "large-v3"

    def __str__(self) -> str:
        return self.value

    @property
    def filename(self) -> str:
        return f"ggml-{self.value}.bin"

    @property
    def url(self) -> str:
        """Canonical HTTPS download location."""
        return self.url_for(CANONICAL_MODEL_BASE_URL)

    def url_for(self, base_url: Optional[str]) -> str:
        base = (base_url or CANONICAL_MODEL_BASE_URL).rstrip("/")
        return f"{base}/{self.filename}"

    @property
    def approx_size_bytes(self) -> int:
        return _APPROX_SIZE_BYTES[self]

    @property
    def english_only(self) -> bool:
        return self.value.endswith(".en")

    @classmethod
    def from_name(cls, name: str) -> ModelType:
        """Parse a slug such as "base.en"; case-insensitive.

        Raises:
            ValueError: If the name is not a known model.
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            available = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unknown model '{name}'. Available models: {available}"
            ) from None


_APPROX_SIZE_BYTES: Dict[ModelType, int] = {
    ModelType.TINY_EN: 75 * _MB,
    ModelType.TINY: 75 * _MB,
    ModelType.BASE_EN: 142 * _MB,
    ModelType.BASE: 142 * _MB,
    ModelType.SMALL_EN: 466 * _MB,
    ModelType.SMALL: 466 * _MB,
    ModelType.MEDIUM_EN: 1_500 * _MB,
    ModelType.MEDIUM: 1_500 * _MB,
    ModelType.LARGE_V1: 2_900 * _MB,
    ModelType.LARGE_V2: 2_900 * _MB,
    ModelType.LARGE_V3: 2_900 * _MB,
}
