"""Unit tests for image path resolution."""

import os

import pytest

from core.images import ImageResolver, fallback_name, image_path


def test_image_path_template():
    assert image_path("sunset") == "/pictures/sunset.file"
    assert fallback_name("3") == "fb_3"


def test_explicit_image_wins_over_category(images):
    assert images.resolve("own", "1") == "/pictures/own.file"
    assert images.resolve("own", "2") == "/pictures/own.file"
    assert images.resolve("own", "") == "/pictures/own.file"


def test_explicit_image_need_not_exist_on_disk(images):
    assert images.resolve("missing", "") == "/pictures/missing.file"


@pytest.mark.parametrize("image", ["", "   "])
def test_category_fallback_used_when_asset_exists(images, image):
    assert images.resolve(image, "1") == "/pictures/fb_1.file"


def test_no_fallback_asset_resolves_empty(images):
    assert images.resolve("", "2") == ""


def test_no_image_no_category_resolves_empty(images):
    assert images.resolve("", "") == ""


def test_refresh_picks_up_new_assets(images, pictures_dir):
    assert not images.has_fallback("2")

    (pictures_dir / "fb_2.file").write_bytes(b"fallback-2")
    assert images.resolve("", "2") == ""

    images.refresh()
    assert images.resolve("", "2") == "/pictures/fb_2.file"


def test_refresh_ignores_directories_and_unrelated_files(pictures_dir):
    (pictures_dir / "fb_9.file").mkdir()
    (pictures_dir / "fb_8.png").write_bytes(b"x")
    (pictures_dir / "fb_.file").write_bytes(b"x")

    resolver = ImageResolver(pictures_dir)
    resolver.refresh()

    assert resolver.fallback_categories == frozenset({"1"})


def test_missing_directory_has_no_fallbacks(tmp_path):
    resolver = ImageResolver(tmp_path / "nope")
    resolver.refresh()

    assert resolver.fallback_categories == frozenset()
    assert resolver.resolve("", "1") == ""


def _touch_dir(directory):
    stat = directory.stat()
    os.utime(directory, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))


def test_refresh_if_changed_rescans_after_directory_change(images, pictures_dir):
    assert not images.refresh_if_changed()

    (pictures_dir / "fb_2.file").write_bytes(b"fallback-2")
    _touch_dir(pictures_dir)

    assert images.refresh_if_changed()
    assert images.resolve("", "2") == "/pictures/fb_2.file"


def test_refresh_if_changed_drops_removed_assets(images, pictures_dir):
    (pictures_dir / "fb_1.file").unlink()
    _touch_dir(pictures_dir)

    images.refresh_if_changed()

    assert images.resolve("", "1") == ""


def test_refresh_if_changed_scans_once_when_never_refreshed(pictures_dir):
    resolver = ImageResolver(pictures_dir)

    assert resolver.refresh_if_changed()
    assert not resolver.refresh_if_changed()
    assert resolver.has_fallback("1")


def test_refresh_if_changed_picks_up_created_directory(tmp_path):
    directory = tmp_path / "later"
    resolver = ImageResolver(directory)
    resolver.refresh()
    assert not resolver.refresh_if_changed()

    directory.mkdir()
    (directory / "fb_3.file").write_bytes(b"x")

    assert resolver.refresh_if_changed()
    assert resolver.has_fallback("3")
