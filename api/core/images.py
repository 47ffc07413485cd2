"""
Image path resolution for quotes.

A quote shows its own image when it has one. Otherwise it borrows its
category's fallback asset (`fb_<category>.file`) if that file exists in the
pictures directory. Fallback presence is cached per directory scan so
listing many quotes never touches the filesystem; `refresh_if_changed()`
rescans only when the directory's mtime moves.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

URL_PREFIX = "/pictures"
FILE_SUFFIX = ".file"
FALLBACK_PREFIX = "fb_"


def image_path(name: str) -> str:
    return f"{URL_PREFIX}/{name}{FILE_SUFFIX}"


def fallback_name(category: str) -> str:
    return f"{FALLBACK_PREFIX}{category}"


class ImageResolver:
    def __init__(self, pictures_dir: Path):
        self._pictures_dir = pictures_dir
        self._fallbacks: frozenset[str] = frozenset()
        self._scanned_mtime: int | None = None
        self._scanned = False

    @property
    def pictures_dir(self) -> Path:
        return self._pictures_dir

    @property
    def fallback_categories(self) -> frozenset[str]:
        return self._fallbacks

    def _dir_mtime(self) -> int | None:
        try:
            return self._pictures_dir.stat().st_mtime_ns
        except FileNotFoundError:
            return None

    def refresh(self) -> None:
        """
        Rescan the pictures directory for category fallback assets.
        """
        mtime = self._dir_mtime()
        found: set[str] = set()
        if self._pictures_dir.is_dir():
            for entry in self._pictures_dir.iterdir():
                name = entry.name
                if not (name.startswith(FALLBACK_PREFIX) and name.endswith(FILE_SUFFIX)):
                    continue
                if not entry.is_file():
                    continue
                category = name[len(FALLBACK_PREFIX) : -len(FILE_SUFFIX)]
                if category:
                    found.add(category)
        else:
            logger.warning("pictures_dir_missing path=%s", self._pictures_dir)

        # Swap in one assignment; readers see either the old or the new set.
        self._fallbacks = frozenset(found)
        self._scanned_mtime = mtime
        self._scanned = True
        logger.info("fallback_images_loaded count=%s", len(found))

    def refresh_if_changed(self) -> bool:
        """
        Rescan when files were added to or removed from the directory since
        the last scan. Returns True when a rescan happened.
        """
        if self._scanned and self._dir_mtime() == self._scanned_mtime:
            return False
        self.refresh()
        return True

    def has_fallback(self, category: str) -> bool:
        return category in self._fallbacks

    def resolve(self, image: str, category: str) -> str:
        image = (image or "").strip()
        if image:
            return image_path(image)

        category = (category or "").strip()
        if category and self.has_fallback(category):
            return image_path(fallback_name(category))

        return ""
