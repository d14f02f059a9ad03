import asyncio
import secrets
import time
from pathlib import Path
from typing import Callable, Optional

import aiohttp
import ffmpeg
from loguru import logger

from vidluxe.config import MediaConfig
from vidluxe.exceptions import ProviderException, ResourceNotFoundException, TimeoutException
from vidluxe.generation.orchestrator import EnhancementOrchestrator
from vidluxe.generation.style_prompts import get_cover_prompt
from vidluxe.media.download import download_file
from vidluxe.media.process_runner import ProcessRunner
from vidluxe.media.storage import MediaStorage
from vidluxe.utils.error_handler import convert_exceptions, handle_exceptions


class CoverService:
    """Turns a keyframe into a cover image and attaches covers to videos."""

    def __init__(
        self,
        orchestrator: Optional[EnhancementOrchestrator] = None,
        storage: Optional[MediaStorage] = None,
        runner: Optional[ProcessRunner] = None,
        media_config: Optional[MediaConfig] = None,
    ):
        self.storage = storage or MediaStorage()
        self.orchestrator = orchestrator or EnhancementOrchestrator(storage=self.storage)
        self.media_config = media_config or (runner.config if runner else MediaConfig())
        self.runner = runner or ProcessRunner(self.media_config)

    @staticmethod
    def _unique_name(prefix: str, suffix: str) -> str:
        return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(8)}{suffix}"

    async def enhance_cover(
        self,
        frame_url: str,
        style: str = "magazine",
        on_progress: Optional[Callable[[int, str], None]] = None,
    ) -> str:
        """Generate a cover from a keyframe and return the web-relative URL of the saved image."""
        prompt = get_cover_prompt(style)
        logger.info(f"CoverService: enhancing {frame_url} as '{style}' cover")
        result_url = await self.orchestrator.run(prompt, frame_url, on_progress)
        local_path = await self.download_result(result_url)
        return self.storage.to_url(local_path)

    @convert_exceptions({aiohttp.ClientError: ProviderException, asyncio.TimeoutError: TimeoutException})
    @handle_exceptions(retries=3, exceptions=(aiohttp.ClientError, asyncio.TimeoutError))
    async def download_result(self, url: str) -> Path:
        """Download a generated image into the covers root."""
        output_path = self.storage.covers_root / self._unique_name("cover", ".png")
        await download_file(url, output_path)
        logger.info(f"CoverService: saved generated cover to {output_path}")
        return output_path

    async def embed_cover(self, video_url: str, cover_url: str) -> str:
        """
        Attach a cover image to a video as its thumbnail stream.

        Streams are copied, not re-encoded. Returns the web-relative URL of
        the new video.
        """
        video_path = self.storage.to_local_path(video_url)
        cover_path = self.storage.to_local_path(cover_url)
        if not video_path.is_file():
            raise ResourceNotFoundException(f"Video not found: {video_url}")
        if not cover_path.is_file():
            raise ResourceNotFoundException(f"Cover not found: {cover_url}")

        output_path = self.storage.with_cover_root / self._unique_name("with_cover", ".mp4")
        args = (
            ffmpeg
            .output(
                ffmpeg.input(str(video_path)),
                ffmpeg.input(str(cover_path)),
                str(output_path),
                c="copy",
                **{"disposition:v:1": "attached_pic"},
            )
            .overwrite_output()
            .get_args()
        )

        try:
            await self.runner.run(self.media_config.ffmpeg_path, args, self.media_config.embed_timeout)
        except BaseException:
            output_path.unlink(missing_ok=True)
            raise

        if not output_path.exists():
            raise ResourceNotFoundException(
                "Cover embedding finished but no output file was written",
                details={"output_path": str(output_path)},
            )
        logger.info(f"CoverService: embedded {cover_url} into {video_url} -> {output_path.name}")
        return self.storage.to_url(output_path)
