"""
Test suite for MediaProbe.
"""

import pytest

from conftest import FakeRunner
from vidluxe.media.media_probe import MediaProbe, parse_duration_banner, parse_frame_rate


@pytest.mark.parametrize(
    "rate, expected",
    [
        ("30/1", 30),
        ("30000/1001", 30),
        ("24000/1001", 24),
        ("25", 25),
        ("0/0", None),
        ("", None),
        ("abc", None),
    ],
)
def test_parse_frame_rate(rate, expected):
    assert parse_frame_rate(rate) == expected


def test_parse_duration_banner():
    stderr = "Input #0, mov,mp4\n  Duration: 00:01:05.50, start: 0.000000, bitrate: 1205 kb/s\n"
    assert parse_duration_banner(stderr) == pytest.approx(65.5)
    assert parse_duration_banner("no banner here") == 0.0


async def test_probe_reads_stream_and_duration():
    runner = FakeRunner(duration=12.5, width=720, height=1280, rate="30000/1001")
    info = await MediaProbe(runner).probe("/videos/a.mp4")

    assert (info.width, info.height, info.fps) == (720, 1280, 30)
    assert info.duration == pytest.approx(12.5)


async def test_probe_defaults_on_unparseable_output():
    class BrokenRunner(FakeRunner):
        def _ffprobe(self, args):
            result = super()._ffprobe(args)
            if "format=duration" in args:
                return result
            return type(result)(args, 0, "not json", "")

    info = await MediaProbe(BrokenRunner(duration=3.0)).probe("/videos/a.mp4")

    assert (info.width, info.height, info.fps) == (1080, 1920, 30)
    assert info.duration == pytest.approx(3.0)


async def test_duration_falls_back_to_ffmpeg_banner():
    runner = FakeRunner(duration=None, banner="  Duration: 00:00:09.04, start: 0.0")
    duration = await MediaProbe(runner).get_duration("/videos/a.mp4")

    assert duration == pytest.approx(9.04)
    assert any("-hide_banner" in args for args in runner.ffmpeg_calls)


async def test_duration_is_zero_when_unknown():
    runner = FakeRunner(duration=None, banner="")
    assert await MediaProbe(runner).get_duration("/videos/a.mp4") == 0.0
