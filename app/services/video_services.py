from functools import lru_cache
from pathlib import Path

from loguru import logger

from vidluxe.color import ColorAnalyzer, ColorGradeBuilder, explain
from vidluxe.config import VidLuxeConfig
from vidluxe.cover import CoverService, FrameReplacement, FrameReplacer
from vidluxe.exceptions import ResourceNotFoundException
from vidluxe.generation import EnhancementOrchestrator, ExternalTaskClient
from vidluxe.keyframes import KeyframeExtractor
from vidluxe.media import MediaProbe, MediaStorage, ProcessRunner
from vidluxe.utils.logging_config import log_manager


class VideoPipeline:
    """All pipeline components wired from one configuration."""

    def __init__(self, config: VidLuxeConfig, runner: ProcessRunner = None, client: ExternalTaskClient = None):
        self.config = config
        self.storage = MediaStorage(config.storage)
        self.runner = runner or ProcessRunner(config.media)
        self.probe = MediaProbe(self.runner, config.media)
        self.keyframes = KeyframeExtractor(self.storage, self.runner, config.keyframes, config.media)
        self.analyzer = ColorAnalyzer(self.storage, self.runner, config.color, config.media)
        self.grader = ColorGradeBuilder(self.storage, self.runner, config.color, config.media)
        self.client = client or ExternalTaskClient(config.generation)
        self.orchestrator = EnhancementOrchestrator(self.client, self.storage, config.generation)
        self.covers = CoverService(self.orchestrator, self.storage, self.runner, config.media)
        self.replacer = FrameReplacer(self.storage, self.runner, config.media)

    def local_video(self, video_url: str) -> Path:
        path = self.storage.to_local_path(video_url)
        if not path.is_file():
            raise ResourceNotFoundException(f"Video file not found: {video_url}")
        return path

    async def close(self):
        await self.client.close()
        self.keyframes.close()


@lru_cache
def get_pipeline() -> VideoPipeline:
    config = VidLuxeConfig()
    log_manager.configure(config.logging)
    return VideoPipeline(config)


async def shutdown_pipeline():
    """Close the cached pipeline, if one was ever built."""
    if get_pipeline.cache_info().currsize:
        await get_pipeline().close()
        get_pipeline.cache_clear()


async def extract_keyframes(pipeline: VideoPipeline, body: dict) -> dict:
    video_path = str(pipeline.local_video(body["video_url"]))
    info = await pipeline.probe.probe(video_path)
    frames = await pipeline.keyframes.extract(video_path, body.get("interval"), body.get("top_n"))
    return {
        "success": True,
        "session_id": frames[0].session_id,
        "keyframes": [frame.to_dict() for frame in frames],
        "video_info": {
            "width": info.width,
            "height": info.height,
            "fps": info.fps,
            "duration": info.duration,
        },
    }


def cleanup_keyframes(pipeline: VideoPipeline, session_id: str) -> dict:
    if not pipeline.keyframes.cleanup(session_id):
        raise ResourceNotFoundException(f"Keyframe session not found: {session_id}")
    return {"success": True, "session_id": session_id}


async def analyze_video(pipeline: VideoPipeline, body: dict) -> dict:
    video_path = str(pipeline.local_video(body["video_url"]))
    analysis = await pipeline.analyzer.analyze(video_path)
    return {
        "success": True,
        "analysis": analysis.to_dict(),
        "explanation": explain(analysis),
        "filter_chain": pipeline.grader.build_filter_chain(analysis).to_ffmpeg(),
    }


async def color_grade(pipeline: VideoPipeline, body: dict) -> dict:
    video_path = str(pipeline.local_video(body["video_url"]))
    analysis = await pipeline.analyzer.analyze(video_path)
    chain = pipeline.grader.build_filter_chain(analysis)
    output_path = await pipeline.grader.apply(
        video_path, chain,
        preview_only=body.get("preview_only", False),
        preview_duration=body.get("preview_duration"),
    )
    removed = pipeline.grader.prune()
    if removed:
        logger.info(f"Removed {removed} expired graded videos")
    return {
        "success": True,
        "analysis": analysis.to_dict(),
        "explanation": explain(analysis),
        "filter_chain": chain.to_ffmpeg(),
        "graded_video_url": pipeline.storage.to_url(output_path),
    }


async def enhance_cover(pipeline: VideoPipeline, body: dict) -> dict:
    enhanced_url = await pipeline.covers.enhance_cover(body["frame_url"], body.get("style", "magazine"))
    return {"success": True, "enhanced_url": enhanced_url}


async def enhance_frames(pipeline: VideoPipeline, body: dict) -> dict:
    batch = await pipeline.orchestrator.enhance_batch(body["frame_urls"], body.get("style", "magazine"))
    return {
        "success": True,
        "results": [
            {
                "original_url": item.source_url,
                "success": item.success,
                "enhanced_url": item.result_url,
                "error": item.error,
                "error_code": item.error_code,
            }
            for item in batch.items
        ],
        "success_count": batch.success_count,
        "failure_count": batch.failure_count,
    }


async def embed_cover(pipeline: VideoPipeline, body: dict) -> dict:
    video_url = await pipeline.covers.embed_cover(body["video_url"], body["cover_url"])
    return {"success": True, "video_url": video_url}


async def replace_frames(pipeline: VideoPipeline, body: dict) -> dict:
    frames = [FrameReplacement(frame["timestamp"], frame["image_url"]) for frame in body["frames"]]
    result = await pipeline.replacer.replace_frames(body["video_url"], frames)
    return {
        "success": True,
        "video_url": result.video_url,
        "replaced_count": result.replaced,
        "skipped_count": result.skipped,
    }
