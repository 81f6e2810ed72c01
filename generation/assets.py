"""
Exercise image paths.

Images live on disk under storage/exercise/ and are served under
image/exercise/. Both forms end in the bare filename.
"""

from typing import Iterable

STORAGE_PREFIX = "storage/exercise/"
SERVING_PREFIX = "image/exercise/"
IMAGE_EXT = ".png"


def asset_filename(value: str) -> str:
    """Strip any directory part: 'storage/exercise/kucing.png' → 'kucing.png'."""
    return (value or "").strip().split("/")[-1]


def with_png(filename: str) -> str:
    return filename if filename.lower().endswith(IMAGE_EXT) else filename + IMAGE_EXT


def to_serving_path(value: str) -> str:
    return SERVING_PREFIX + with_png(asset_filename(value))


def to_storage_path(value: str) -> str:
    return STORAGE_PREFIX + with_png(asset_filename(value))


def in_whitelist(value: str, whitelist: Iterable[str]) -> bool:
    """
    True when the path-stripped filename is one of the whitelisted assets.
    'kucing' and 'kucing.png' name the same asset.
    """
    allowed = {with_png(asset_filename(w)) for w in whitelist if w}
    filename = asset_filename(value)
    return bool(filename) and with_png(filename) in allowed
