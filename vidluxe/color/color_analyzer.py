import asyncio
from typing import Dict, List, Optional

from loguru import logger

from vidluxe.color.models import METRIC_NAMES, ColorAnalysis, ColorMetric, MetricStatus, classify
from vidluxe.config import ColorConfig, KeyframeConfig, MediaConfig
from vidluxe.exceptions import AnalysisFailedException
from vidluxe.keyframes.frame_sampler import FrameSampler
from vidluxe.media import image_stats
from vidluxe.media.media_probe import MediaProbe
from vidluxe.media.process_runner import ProcessRunner
from vidluxe.media.storage import MediaStorage
from vidluxe.utils.error_handler import log_exceptions

_ISSUES = {
    ("brightness", MetricStatus.LOW): ("the image is underexposed", "raise the exposure"),
    ("brightness", MetricStatus.HIGH): ("the image is overexposed", "lower the exposure"),
    ("contrast", MetricStatus.LOW): ("contrast is flat", "add contrast for more depth"),
    ("contrast", MetricStatus.HIGH): ("contrast is too harsh", "reduce contrast slightly"),
    ("saturation", MetricStatus.LOW): ("colors are washed out", "boost saturation"),
    ("saturation", MetricStatus.HIGH): ("colors are oversaturated", "tone saturation down"),
    ("color_temp", MetricStatus.LOW): ("the white balance is too cool", "warm up the tones"),
    ("color_temp", MetricStatus.HIGH): ("the white balance is too warm", "cool down the tones"),
    ("sharpness", MetricStatus.LOW): ("the image is soft", "apply sharpening"),
    ("noise", MetricStatus.HIGH): ("there is visible noise", "apply denoising"),
}


def sample_timestamps(duration: float, count: int, edge_margin: float) -> List[float]:
    """`count` points spread evenly between edge_margin and 1 - edge_margin of the duration."""
    if count <= 1:
        return [duration / 2]
    start = duration * edge_margin
    span = duration * (1 - 2 * edge_margin)
    return [start + span * i / (count - 1) for i in range(count)]


def explain(analysis: ColorAnalysis) -> str:
    """Human-readable summary of detected issues and suggested corrections."""
    issues = []
    suggestions = []
    for name, metric in analysis.items():
        entry = _ISSUES.get((name, metric.status))
        if entry:
            issues.append(entry[0])
            suggestions.append(entry[1])

    if not issues:
        return (
            "Colors look good: every metric is within its normal range. "
            "Keep the current grade or fine-tune it to taste."
        )
    return f"Detected issues: {', '.join(issues)}. Suggested: {'; '.join(suggestions)}."


def default_analysis() -> ColorAnalysis:
    """All-normal placeholder for display when analysis could not run. Never grade with it."""
    values = {"brightness": 50, "contrast": 50, "saturation": 45, "color_temp": 50, "sharpness": 70, "noise": 15}
    return ColorAnalysis(**{
        name: ColorMetric(value=float(value), status=MetricStatus.NORMAL, adjustment=0.0)
        for name, value in values.items()
    })


class ColorAnalyzer:
    """
    Measures six color metrics over a few frames spread across a video.

    Frames go to a scratch session directory that is always removed before
    returning, whether analysis succeeded or not.
    """

    def __init__(
        self,
        storage: Optional[MediaStorage] = None,
        runner: Optional[ProcessRunner] = None,
        config: Optional[ColorConfig] = None,
        media_config: Optional[MediaConfig] = None,
    ):
        self.config = config or ColorConfig()
        self.media_config = media_config or (runner.config if runner else MediaConfig())
        self.storage = storage or MediaStorage()
        self.runner = runner or ProcessRunner(self.media_config)
        self.probe = MediaProbe(self.runner, self.media_config)
        self.sampler = FrameSampler(self.runner, self.probe, KeyframeConfig(), self.media_config)

    @log_exceptions(log_level="WARNING", include_traceback=False, custom_message="Color analysis failed")
    async def analyze(self, video_path: str) -> ColorAnalysis:
        duration = await self.probe.get_duration(video_path)
        if duration <= 0:
            raise AnalysisFailedException(
                "could not determine video duration", details={"video_path": video_path}
            )

        root = self.storage.color_analysis_root
        session_id, session_dir = self.storage.new_session_dir(root)
        try:
            timestamps = sample_timestamps(duration, self.config.sample_frames, self.config.edge_margin)
            frames = await self.sampler.extract_frames(
                video_path, timestamps, session_dir, prefix="sample", session_id=session_id
            )
            if not frames:
                raise AnalysisFailedException(
                    "no frames could be extracted", details={"video_path": video_path}
                )

            loop = asyncio.get_running_loop()
            measurements = await loop.run_in_executor(
                None, self._measure_all, [frame.local_path for frame in frames]
            )
        finally:
            self.storage.remove_session(root, session_id)

        if not measurements:
            raise AnalysisFailedException(
                "no extracted frame could be decoded", details={"video_path": video_path}
            )

        analysis = self._summarize(measurements)
        logger.info(
            f"ColorAnalyzer: {video_path} over {len(measurements)} frames -> "
            + ", ".join(f"{name}={m.value}({m.status.value})" for name, m in analysis.items())
        )
        return analysis

    def _measure_all(self, paths: List[str]) -> List[Dict[str, float]]:
        measurements = []
        for path in paths:
            try:
                measurements.append(image_stats.measure(image_stats.load_image(path)))
            except ValueError as e:
                logger.warning(f"ColorAnalyzer: skipping frame {path}: {e}")
        return measurements

    def _summarize(self, measurements: List[Dict[str, float]]) -> ColorAnalysis:
        count = len(measurements)
        metrics = {}
        for name in METRIC_NAMES:
            mean = sum(m[name] for m in measurements) / count
            metrics[name] = classify(mean, getattr(self.config, name))
        return ColorAnalysis(**metrics)
