"""Error taxonomy for the volume and mesh decoders."""

from __future__ import annotations

from typing import Optional, Sequence


class DecodeError(ValueError):
    """Base class for every failure raised while decoding an input buffer.

    ``filename`` is filled in by the file-load handler so the message shown
    to the user names the failing file.
    """

    def __init__(self, message: str, filename: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.filename = filename

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}: {self.message}"
        return self.message


class FormatError(DecodeError):
    """Malformed, truncated or unrecognized structure."""


class UnsupportedTypeError(DecodeError):
    """Recognized container carrying an element/datatype we cannot decode."""


class DecompressionError(DecodeError):
    """Compressed payload is corrupt or cannot be inflated."""


class DimensionMismatchError(ValueError):
    """Two co-registered volumes disagree on their sizes."""

    def __init__(self, image_sizes: Sequence[int], label_sizes: Sequence[int]) -> None:
        self.image_sizes = tuple(image_sizes)
        self.label_sizes = tuple(label_sizes)
        super().__init__(
            f"Image and label dimensions do not match: {self.image_sizes} vs {self.label_sizes}"
        )
