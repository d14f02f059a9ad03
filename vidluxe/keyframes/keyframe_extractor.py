import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from loguru import logger

from vidluxe.config import KeyframeConfig, MediaConfig
from vidluxe.exceptions import NoFramesExtractedException, UnknownDurationException, ValidationException
from vidluxe.keyframes.frame_sampler import FrameSampler
from vidluxe.keyframes.frame_scorer import FrameScorer
from vidluxe.keyframes.models import FrameScore, SampledFrame
from vidluxe.media.media_probe import MediaProbe
from vidluxe.media.process_runner import ProcessRunner
from vidluxe.media.storage import MediaStorage
from vidluxe.utils.error_handler import log_exceptions


class KeyframeExtractor:
    """
    Probe -> sample -> score -> rank.

    Every call writes its frames into a fresh session directory under the
    keyframes root. The directory outlives the call; `cleanup(session_id)`
    removes it.
    """

    def __init__(
        self,
        storage: Optional[MediaStorage] = None,
        runner: Optional[ProcessRunner] = None,
        config: Optional[KeyframeConfig] = None,
        media_config: Optional[MediaConfig] = None,
        scorer: Optional[FrameScorer] = None,
        max_workers: int = 4,
    ):
        self.config = config or KeyframeConfig()
        self.media_config = media_config or (runner.config if runner else MediaConfig())
        self.storage = storage or MediaStorage()
        self.runner = runner or ProcessRunner(self.media_config)
        self.probe = MediaProbe(self.runner, self.media_config)
        self.sampler = FrameSampler(self.runner, self.probe, self.config, self.media_config)
        self.scorer = scorer or FrameScorer(self.storage, self.config)
        self.executor = ThreadPoolExecutor(max_workers=max_workers)

    @log_exceptions(log_level="WARNING", include_traceback=False, custom_message="Keyframe extraction failed")
    async def extract(
        self,
        video_path: str,
        interval: Optional[float] = None,
        top_n: Optional[int] = None,
    ) -> List[FrameScore]:
        if interval is None:
            interval = self.config.extract_interval
        if top_n is None:
            top_n = self.config.top_frames
        if interval <= 0 or top_n < 1:
            raise ValidationException(
                "interval must be positive and top_n at least 1",
                details={"interval": interval, "top_n": top_n},
            )

        duration = await self.probe.get_duration(video_path)
        if duration <= 0:
            raise UnknownDurationException(
                f"Could not determine video duration: {video_path}",
                details={"video_path": video_path},
            )

        session_id, session_dir = self.storage.new_session_dir(self.storage.keyframes_root)
        logger.info(f"KeyframeExtractor: session {session_id} for {video_path} ({duration:.2f}s)")

        try:
            # Clips shorter than one interval still contribute the frame at t=0
            frames = await self.sampler.sample(
                video_path,
                interval=min(interval, duration),
                max_frames=self.config.max_frames,
                output_dir=session_dir,
                session_id=session_id,
                duration=duration,
            )
            if not frames:
                raise NoFramesExtractedException(
                    f"No frames could be extracted from {video_path}",
                    details={"session_id": session_id},
                )

            loop = asyncio.get_running_loop()
            scored = await asyncio.gather(
                *(loop.run_in_executor(self.executor, self._score_frame, frame) for frame in frames)
            )
            scores = [score for score in scored if score is not None]
            if not scores:
                raise NoFramesExtractedException(
                    f"No extracted frame of {video_path} could be scored",
                    details={"session_id": session_id},
                )
        except BaseException:
            self.storage.remove_session(self.storage.keyframes_root, session_id)
            raise

        ranked = sorted(scores, key=lambda s: (-s.score, s.timestamp))[:top_n]
        logger.info(
            f"KeyframeExtractor: session {session_id} scored {len(scores)} frames, "
            f"returning top {len(ranked)} (best={ranked[0].score})"
        )
        return ranked

    def _score_frame(self, frame: SampledFrame) -> Optional[FrameScore]:
        try:
            return self.scorer.score(frame)
        except (ValueError, OSError) as e:
            logger.warning(f"KeyframeExtractor: skipping unreadable frame {frame.local_path}: {e}")
            return None

    def cleanup(self, session_id: str) -> bool:
        """Remove the frames of one extraction session. False if nothing was there."""
        return self.storage.remove_session(self.storage.keyframes_root, session_id)

    def close(self):
        self.executor.shutdown(wait=False)
