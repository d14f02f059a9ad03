import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import aiohttp
import ffmpeg
from loguru import logger

from vidluxe.config import MediaConfig
from vidluxe.exceptions import ResourceNotFoundException, ValidationException
from vidluxe.media.download import DOWNLOAD_TIMEOUT, download_file
from vidluxe.media.media_probe import MediaProbe
from vidluxe.media.process_runner import ProcessRunner
from vidluxe.media.storage import MediaStorage

_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".webp")


@dataclass(frozen=True)
class FrameReplacement:
    """An image to show at `timestamp` seconds into the source video."""

    timestamp: float
    image_url: str


@dataclass(frozen=True)
class ReplacementResult:
    video_url: str
    replaced: int
    skipped: int


def _fmt_seconds(value: float) -> str:
    return f"{round(value, 3):g}"


class FrameReplacer:
    """
    Writes enhanced keyframes back into their source video.

    Each image is scaled and padded to the video frame size, then overlaid
    for `overlay_duration` seconds from its timestamp. Audio is copied when
    the source has any. `/uploads/...` images are used in place; http(s)
    images are downloaded into a scratch session that is removed before
    returning. Images that cannot be resolved are skipped.
    """

    def __init__(
        self,
        storage: Optional[MediaStorage] = None,
        runner: Optional[ProcessRunner] = None,
        media_config: Optional[MediaConfig] = None,
    ):
        self.storage = storage or MediaStorage()
        self.media_config = media_config or (runner.config if runner else MediaConfig())
        self.runner = runner or ProcessRunner(self.media_config)
        self.probe = MediaProbe(self.runner, self.media_config)

    def build_args(
        self,
        video_path: str,
        images: Sequence[Tuple[float, Path]],
        output_path: str,
        width: int,
        height: int,
    ) -> List[str]:
        source = ffmpeg.input(video_path)
        video = source.video
        for timestamp, image_path in images:
            image = (
                ffmpeg
                .input(str(image_path))
                .filter("scale", width, height, force_original_aspect_ratio="decrease")
                .filter("pad", width, height, "(ow-iw)/2", "(oh-ih)/2")
            )
            end = timestamp + self.media_config.overlay_duration
            video = video.overlay(
                image, x=0, y=0, enable=f"between(t,{_fmt_seconds(timestamp)},{_fmt_seconds(end)})"
            )

        return (
            ffmpeg
            .output(
                video,
                output_path,
                vcodec="libx264",
                preset="fast",
                crf=23,
                acodec="copy",
                movflags="+faststart",
                # audio is optional
                map="0:a?",
            )
            .overwrite_output()
            .get_args()
        )

    async def replace_frames(self, video_url: str, frames: Sequence[FrameReplacement]) -> ReplacementResult:
        video_path = self.storage.to_local_path(video_url)
        if not video_path.is_file():
            raise ResourceNotFoundException(f"Video file not found: {video_url}")
        if not frames:
            raise ValidationException("No frames to replace")
        for frame in frames:
            if frame.timestamp < 0:
                raise ValidationException(f"Frame timestamp must not be negative: {frame.timestamp}")

        root = self.storage.replace_frames_root
        session_id, session_dir = self.storage.new_session_dir(root)
        output_path = self.storage.replaced_root / f"replaced_{session_id}.mp4"
        try:
            images = await self._resolve_images(frames, session_dir)
            if not images:
                raise ResourceNotFoundException(
                    "None of the replacement frames could be resolved",
                    details={"requested": len(frames)},
                )

            info = await self.probe.probe(str(video_path))
            args = self.build_args(str(video_path), images, str(output_path), info.width, info.height)
            logger.info(f"FrameReplacer: overlaying {len(images)}/{len(frames)} frames onto {video_url}")
            try:
                await self.runner.run(self.media_config.ffmpeg_path, args, self.media_config.replace_timeout)
            except BaseException:
                output_path.unlink(missing_ok=True)
                raise
        finally:
            self.storage.remove_session(root, session_id)

        if not output_path.exists():
            raise ResourceNotFoundException(
                "Frame replacement finished but no output file was written",
                details={"output_path": str(output_path)},
            )
        logger.info(f"FrameReplacer: wrote {output_path.name}")
        return ReplacementResult(
            video_url=self.storage.to_url(output_path),
            replaced=len(images),
            skipped=len(frames) - len(images),
        )

    async def _resolve_images(
        self, frames: Sequence[FrameReplacement], session_dir: Path
    ) -> List[Tuple[float, Path]]:
        images = []
        timeout = aiohttp.ClientTimeout(total=DOWNLOAD_TIMEOUT)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            for index, frame in enumerate(frames):
                path = await self._resolve_image(session, frame.image_url, session_dir, index)
                if path is not None:
                    images.append((frame.timestamp, path))
        return images

    async def _resolve_image(
        self, session: aiohttp.ClientSession, url: str, session_dir: Path, index: int
    ) -> Optional[Path]:
        if url.startswith(("http://", "https://")):
            suffix = Path(urlparse(url).path).suffix.lower()
            if suffix not in _IMAGE_SUFFIXES:
                suffix = ".png"
            try:
                return await download_file(url, session_dir / f"frame_{index:03d}{suffix}", session=session)
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                logger.warning(f"FrameReplacer: skipping frame {url}, download failed: {e}")
                return None

        try:
            path = self.storage.to_local_path(url)
        except ValidationException as e:
            logger.warning(f"FrameReplacer: skipping frame {url}: {e}")
            return None
        if not path.is_file():
            logger.warning(f"FrameReplacer: skipping frame {url}, file not found")
            return None
        return path
