"""Locate images referenced by styles (image-source) on disk."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image


logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg")


def normalize_image_path(path: str) -> str:
    """Normalize an image reference: no leading slash, forward slashes, lowercase."""
    return path.replace("\\", "/").lstrip("/").lower()


class ImageResolver:
    """Index of image files under a set of directories.

    Images are keyed by their path relative to the directory they were found
    in, normalized with ``normalize_image_path``. Earlier directories win when
    two contain the same relative path.
    """

    def __init__(self, search_paths: list[Path] | None = None) -> None:
        self.search_paths = [Path(p) for p in search_paths or []]
        self._index: dict[str, Path] = {}
        self._sizes: dict[Path, tuple[int, int]] = {}
        self.refresh()

    def refresh(self) -> None:
        """Rescan the search paths."""
        self._index.clear()
        self._sizes.clear()
        for root in self.search_paths:
            if not root.is_dir():
                logger.warning(f"Image path does not exist: {root}")
                continue
            for path in sorted(root.rglob("*")):
                if path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS:
                    key = normalize_image_path(path.relative_to(root).as_posix())
                    self._index.setdefault(key, path)
        logger.debug(f"Indexed {len(self._index)} images")

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, image_path: str) -> bool:
        return self.resolve(image_path) is not None

    def resolve(self, image_path: str | None) -> Path | None:
        """Find the file for an image reference.

        Tries, in order: the exact path, the path without its extension,
        the path with '.png', and finally any indexed path that ends with the
        reference (or that the reference ends with).

        Args:
            image_path: Reference as written in a style (e.g. '/images/ui/button')

        Returns:
            Path to the image file, or None if nothing matches
        """
        if not image_path:
            return None
        normalized = normalize_image_path(image_path)
        if not normalized:
            return None

        if normalized in self._index:
            return self._index[normalized]

        stem = _strip_extension(normalized)
        if stem in self._index:
            return self._index[stem]

        if not normalized.endswith(".png") and f"{stem}.png" in self._index:
            return self._index[f"{stem}.png"]

        for key, path in self._index.items():
            if key.endswith(normalized) or normalized.endswith(key) or _strip_extension(key).endswith(stem):
                return path
        return None

    def size(self, image_path: str) -> tuple[int, int] | None:
        """Pixel size (width, height) of a referenced image, or None."""
        path = self.resolve(image_path)
        if path is None:
            return None
        if path not in self._sizes:
            with Image.open(path) as image:
                self._sizes[path] = image.size
        return self._sizes[path]

    def open(self, image_path: str) -> Image.Image | None:
        """Open a referenced image as RGBA, or None if it cannot be found.

        Raises:
            OSError: If the file exists but cannot be decoded
        """
        path = self.resolve(image_path)
        if path is None:
            return None
        with Image.open(path) as image:
            return image.convert("RGBA")


def _strip_extension(path: str) -> str:
    for extension in IMAGE_EXTENSIONS:
        if path.endswith(extension):
            return path[: -len(extension)]
    return path
