"""
Test suite for MediaStorage path and session handling.
"""

import os
import time

import pytest

from vidluxe.exceptions import ValidationException
from vidluxe.media.storage import MediaStorage


def test_url_round_trip(storage, video_file):
    url = storage.to_url(video_file)

    assert url == "/uploads/videos/clip.mp4"
    assert storage.to_local_path(url) == video_file.resolve()


@pytest.mark.parametrize(
    "url",
    [
        "/uploads/../secret.txt",
        "/uploads/videos/../../etc/passwd",
        "/other/clip.mp4",
        "/uploads/clip.mp4;rm -rf",
        "",
    ],
)
def test_to_local_path_rejects_unsafe_urls(storage, url):
    with pytest.raises(ValidationException):
        storage.to_local_path(url)


def test_to_url_rejects_paths_outside_public_root(storage, tmp_path):
    with pytest.raises(ValidationException):
        storage.to_url(tmp_path / "elsewhere.jpg")


def test_full_url_and_public_check(storage):
    full = storage.to_full_url("/uploads/keyframes/a.jpg")

    assert full == "https://cdn.example.com/uploads/keyframes/a.jpg"
    assert MediaStorage.is_public_url(full)
    assert not MediaStorage.is_public_url("http://localhost:3000/uploads/a.jpg")
    assert not MediaStorage.is_public_url("https://localhost/uploads/a.jpg")
    assert storage.to_full_url("https://x.test/a.png") == "https://x.test/a.png"


def test_sessions_are_unique_and_removable(storage):
    root = storage.keyframes_root
    first_id, first_dir = storage.new_session_dir(root)
    second_id, _ = storage.new_session_dir(root)

    assert first_id != second_id
    assert len(first_id) == 16 and first_dir.is_dir()

    assert storage.remove_session(root, first_id) is True
    assert not first_dir.exists()
    assert storage.remove_session(root, first_id) is False


def test_session_id_is_validated(storage):
    with pytest.raises(ValidationException):
        storage.remove_session(storage.keyframes_root, "../../uploads")


def test_prune_removes_only_old_files(storage):
    root = storage.color_graded_root
    old = root / "graded_old.mp4"
    fresh = root / "graded_new.mp4"
    old.write_bytes(b"1")
    fresh.write_bytes(b"2")
    two_days_ago = time.time() - 2 * 24 * 3600
    os.utime(old, (two_days_ago, two_days_ago))

    assert storage.prune(root) == 1
    assert not old.exists()
    assert fresh.exists()
