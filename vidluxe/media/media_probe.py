import json
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from loguru import logger

from vidluxe.config import MediaConfig
from vidluxe.exceptions import ProcessFailedException, VidLuxeException
from vidluxe.media.process_runner import ProcessRunner
from vidluxe.utils.helper import round_half_up

_DURATION_PATTERN = re.compile(r"Duration: (\d{2}):(\d{2}):(\d{2})\.(\d{2})")


@dataclass(frozen=True)
class MediaInfo:
    """Basic stream properties of a media file. Values may be defaults, never assume exactness."""
    width: int
    height: int
    fps: int
    duration: float


def parse_frame_rate(rate: str) -> Optional[int]:
    """Convert an ffprobe rational such as "30000/1001" to a rounded integer fps."""
    if not rate:
        return None
    try:
        if "/" in rate:
            num, den = rate.split("/", 1)
            value = float(num) / float(den)
        else:
            value = float(rate)
    except (ValueError, ZeroDivisionError):
        return None
    if value <= 0:
        return None
    return int(round_half_up(value))


def parse_duration_banner(stderr: str) -> float:
    """Parse `Duration: HH:MM:SS.cc` out of ffmpeg's input banner; 0.0 if absent."""
    match = _DURATION_PATTERN.search(stderr or "")
    if not match:
        return 0.0
    hours, minutes, seconds, centis = (int(g) for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds + centis / 100


class MediaProbe:
    """
    Queries a media file for dimensions, frame rate and duration through ffprobe.

    Probing is advisory: any failure yields the configured defaults
    (1080x1920 @ 30fps, duration 0.0) instead of raising.
    """

    def __init__(self, runner: Optional[ProcessRunner] = None, config: Optional[MediaConfig] = None) -> None:
        self.config = config or (runner.config if runner else MediaConfig())
        self.runner = runner or ProcessRunner(self.config)

    async def probe(self, path: str) -> MediaInfo:
        width, height, fps = await self._probe_stream(path)
        duration = await self.get_duration(path)
        info = MediaInfo(width=width, height=height, fps=fps, duration=duration)
        logger.info(f"MediaProbe: {path} -> {info.width}x{info.height} @ {info.fps}fps, {info.duration:.2f}s")
        return info

    async def _probe_stream(self, path: str) -> Tuple[int, int, int]:
        defaults = (self.config.default_width, self.config.default_height, self.config.default_fps)
        args = [
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=width,height,r_frame_rate",
            "-of", "json",
            path,
        ]
        try:
            result = await self.runner.run(self.config.ffprobe_path, args, self.config.probe_timeout)
            stream = json.loads(result.stdout)["streams"][0]
            width = int(stream["width"])
            height = int(stream["height"])
        except (VidLuxeException, ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"MediaProbe: stream probe failed for {path}, using defaults: {e}")
            return defaults

        fps = parse_frame_rate(stream.get("r_frame_rate", "")) or self.config.default_fps
        if width <= 0 or height <= 0:
            return defaults
        return width, height, fps

    async def get_duration(self, path: str) -> float:
        """Duration in seconds, or 0.0 when neither ffprobe nor the ffmpeg banner reveal it."""
        args = [
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            path,
        ]
        try:
            result = await self.runner.run(self.config.ffprobe_path, args, self.config.probe_timeout)
            duration = float(result.stdout.strip())
            if duration > 0:
                return duration
        except (VidLuxeException, ValueError) as e:
            logger.warning(f"MediaProbe: duration query failed for {path}: {e}")

        return await self._duration_from_banner(path)

    async def _duration_from_banner(self, path: str) -> float:
        # `ffmpeg -i` without an output always exits nonzero; the banner is on stderr
        try:
            result = await self.runner.run(
                self.config.ffmpeg_path, ["-hide_banner", "-i", path], self.config.probe_timeout
            )
            stderr = result.stderr
        except ProcessFailedException as e:
            stderr = e.stderr_tail
        except VidLuxeException as e:
            logger.warning(f"MediaProbe: ffmpeg fallback failed for {path}: {e}")
            return 0.0
        return parse_duration_banner(stderr)
