import math
import os
from pathlib import Path
from typing import List, Optional, Sequence

import ffmpeg
from loguru import logger

from vidluxe.config import KeyframeConfig, MediaConfig
from vidluxe.exceptions import (
    ProcessFailedException,
    TimeoutException,
    UnknownDurationException,
    ValidationException,
)
from vidluxe.keyframes.models import SampledFrame
from vidluxe.media.media_probe import MediaProbe
from vidluxe.media.process_runner import ProcessRunner


def compute_timestamps(duration: float, interval: float, max_frames: int) -> List[float]:
    """
    Sample points 0, interval, 2*interval, ...

    Yields min(floor(duration / interval), max_frames) timestamps, all
    strictly below `duration`.
    """
    if interval <= 0:
        raise ValidationException(f"Sampling interval must be > 0, got {interval}")
    if max_frames <= 0 or duration <= 0:
        return []
    count = min(math.floor(duration / interval), max_frames)
    return [i * interval for i in range(count)]


class FrameSampler:
    """
    Grabs single JPEG frames from a video at given timestamps.

    One ffmpeg call per timestamp (seek, then grab one frame). A frame that
    fails to extract is logged and skipped; a missing ffmpeg binary aborts
    the whole batch.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        probe: Optional[MediaProbe] = None,
        config: Optional[KeyframeConfig] = None,
        media_config: Optional[MediaConfig] = None,
    ) -> None:
        self.config = config or KeyframeConfig()
        self.media_config = media_config or (runner.config if runner else MediaConfig())
        self.runner = runner or ProcessRunner(self.media_config)
        self.probe = probe or MediaProbe(self.runner, self.media_config)

    async def sample(
        self,
        video_path: str,
        interval: float,
        max_frames: int,
        output_dir,
        session_id: Optional[str] = None,
        duration: Optional[float] = None,
    ) -> List[SampledFrame]:
        if duration is None:
            duration = await self.probe.get_duration(video_path)
        if duration <= 0:
            raise UnknownDurationException(
                f"Could not determine video duration: {video_path}",
                details={"video_path": video_path},
            )

        timestamps = compute_timestamps(duration, interval, max_frames)
        logger.info(
            f"FrameSampler: {os.path.basename(video_path)} | duration={duration:.2f}s "
            f"interval={interval}s -> {len(timestamps)} timestamps"
        )
        return await self.extract_frames(video_path, timestamps, output_dir, session_id=session_id)

    async def extract_frames(
        self,
        video_path: str,
        timestamps: Sequence[float],
        output_dir,
        prefix: str = "frame",
        session_id: Optional[str] = None,
    ) -> List[SampledFrame]:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        frames: List[SampledFrame] = []
        for index, timestamp in enumerate(timestamps):
            output_path = output_dir / f"{prefix}_{index:03d}.jpg"
            args = (
                ffmpeg
                .input(video_path, ss=timestamp)
                .output(str(output_path), vframes=1, **{"q:v": self.config.jpeg_quality})
                .overwrite_output()
                .get_args()
            )
            try:
                await self.runner.run(self.media_config.ffmpeg_path, args, self.media_config.frame_timeout)
            except (ProcessFailedException, TimeoutException) as e:
                logger.warning(f"FrameSampler: failed to extract frame at {timestamp}s: {e}")
                continue

            if output_path.exists():
                frames.append(SampledFrame(local_path=str(output_path), timestamp=timestamp, session_id=session_id))
            else:
                logger.warning(f"FrameSampler: ffmpeg produced no frame at {timestamp}s")

        logger.info(f"FrameSampler: extracted {len(frames)}/{len(timestamps)} frames -> {output_dir}")
        return frames
