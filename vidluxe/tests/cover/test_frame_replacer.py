"""
Test suite for FrameReplacer: overlaying enhanced frames back onto a video.
"""

import pytest

from conftest import PNG_BYTES, FakeRunner
from vidluxe.cover.frame_replacer import FrameReplacement, FrameReplacer
from vidluxe.exceptions import ProcessFailedException, ResourceNotFoundException, ValidationException


@pytest.fixture
def frame_url(storage):
    path = storage.covers_root / "enhanced_a.png"
    path.write_bytes(PNG_BYTES)
    return storage.to_url(path)


def map_targets(args):
    return [args[i + 1] for i, arg in enumerate(args) if arg == "-map"]


async def test_overlays_each_frame_at_its_timestamp(storage, video_file, frame_url):
    runner = FakeRunner(width=720, height=1280)
    replacer = FrameReplacer(storage, runner)

    result = await replacer.replace_frames(
        storage.to_url(video_file),
        [FrameReplacement(1.0, frame_url), FrameReplacement(2.5, frame_url)],
    )

    assert result.video_url.startswith("/uploads/videos/replaced/replaced_")
    assert storage.to_local_path(result.video_url).exists()
    assert (result.replaced, result.skipped) == (2, 0)

    args = runner.ffmpeg_calls[0]
    assert args.count("-i") == 3
    assert args[args.index("-i") + 1] == str(video_file)
    graph = args[args.index("-filter_complex") + 1]
    assert graph.count("scale=720:1280:force_original_aspect_ratio=decrease") == 2
    assert "pad=720:1280:(ow-iw)/2:(oh-ih)/2" in graph
    assert "between(t\\,1\\,1.1)" in graph
    assert "between(t\\,2.5\\,2.6)" in graph
    assert "0:a?" in map_targets(args) and len(map_targets(args)) == 2
    assert args[args.index("-acodec") + 1] == "copy"


async def test_uses_configured_timeout(storage, video_file, frame_url):
    runner = FakeRunner()
    replacer = FrameReplacer(storage, runner)

    await replacer.replace_frames(storage.to_url(video_file), [FrameReplacement(0.5, frame_url)])

    timeouts = [timeout for binary, _, timeout in runner.calls if binary == runner.config.ffmpeg_path]
    assert timeouts == [runner.config.replace_timeout]


async def test_remote_frames_are_downloaded_and_failures_skipped(storage, video_file, file_server):
    runner = FakeRunner()
    replacer = FrameReplacer(storage, runner)

    result = await replacer.replace_frames(
        storage.to_url(video_file),
        [
            FrameReplacement(1.0, str(file_server.make_url("/files/b.png"))),
            FrameReplacement(2.0, str(file_server.make_url("/missing.png"))),
        ],
    )

    assert (result.replaced, result.skipped) == (1, 1)
    assert runner.ffmpeg_calls[0].count("-i") == 2
    assert list(storage.replace_frames_root.iterdir()) == []


async def test_no_resolvable_frame_raises(storage, video_file):
    runner = FakeRunner()
    replacer = FrameReplacer(storage, runner)

    with pytest.raises(ResourceNotFoundException):
        await replacer.replace_frames(
            storage.to_url(video_file),
            [FrameReplacement(1.0, "/uploads/covers/nope.png"), FrameReplacement(2.0, "ftp://host/a.png")],
        )

    assert runner.ffmpeg_calls == []
    assert list(storage.replaced_root.iterdir()) == []
    assert list(storage.replace_frames_root.iterdir()) == []


async def test_failed_render_leaves_no_output(storage, video_file, frame_url):
    replacer = FrameReplacer(storage, FakeRunner(fail_at={0.0}))

    with pytest.raises(ProcessFailedException):
        await replacer.replace_frames(storage.to_url(video_file), [FrameReplacement(1.0, frame_url)])

    assert list(storage.replaced_root.iterdir()) == []
    assert list(storage.replace_frames_root.iterdir()) == []


async def test_missing_video(storage, frame_url):
    replacer = FrameReplacer(storage, FakeRunner())

    with pytest.raises(ResourceNotFoundException):
        await replacer.replace_frames("/uploads/videos/nope.mp4", [FrameReplacement(1.0, frame_url)])


@pytest.mark.parametrize("frames", [[], [FrameReplacement(-1.0, "/uploads/covers/a.png")]])
async def test_invalid_requests(storage, video_file, frames):
    replacer = FrameReplacer(storage, FakeRunner())

    with pytest.raises(ValidationException):
        await replacer.replace_frames(storage.to_url(video_file), frames)
