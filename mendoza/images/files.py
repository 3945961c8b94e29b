"""In-memory image file value shared by the validation and optimization steps."""

from dataclasses import dataclass
from pathlib import PurePosixPath

BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True, eq=False)
class ImageFile:
    """An uploaded image: original file name, declared media type, raw bytes.

    ``eq=False`` keeps identity semantics so callers can tell whether a step
    handed back the very same file.
    """

    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def size_mb(self) -> float:
        return self.size / BYTES_PER_MB

    def with_jpeg_data(self, data: bytes) -> "ImageFile":
        """Return a new ``image/jpeg`` file with the same base name and a ``.jpg`` extension."""
        stem = PurePosixPath(self.name).stem or "image"
        return ImageFile(name=f"{stem}.jpg", content_type="image/jpeg", data=data)


def has_extension(name: str, *extensions: str) -> bool:
    """Case-insensitive file-name extension check (extensions include the dot)."""
    lowered = name.lower()
    return any(lowered.endswith(ext) for ext in extensions)
