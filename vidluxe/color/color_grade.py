import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import ffmpeg
from loguru import logger

from vidluxe.color.models import ColorAnalysis, ColorMetric, MetricStatus
from vidluxe.config import ColorConfig, MediaConfig
from vidluxe.exceptions import ResourceNotFoundException, ValidationException
from vidluxe.media.process_runner import ProcessRunner
from vidluxe.media.storage import MediaStorage
from vidluxe.utils.helper import clamp

NULL_FILTER = "null"


@dataclass(frozen=True)
class FilterStage:
    """One ffmpeg video filter, e.g. name="eq", params={"brightness": 0.03}."""
    metric: str
    name: str
    params: Dict[str, Any] = field(default_factory=dict)

    def to_ffmpeg(self) -> str:
        if not self.params:
            return self.name
        # unsharp/hqdn3d take positional values, eq/colorbalance take key=value
        if self.name in ("unsharp", "hqdn3d"):
            return f"{self.name}=" + ":".join(_fmt(v) for v in self.params.values())
        return f"{self.name}=" + ":".join(f"{k}={_fmt(v)}" for k, v in self.params.items())


@dataclass(frozen=True)
class FilterChain:
    stages: List[FilterStage] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    def to_ffmpeg(self) -> str:
        """Comma-joined filter graph, or `null` (the pass-through filter) when empty."""
        if not self.stages:
            return NULL_FILTER
        return ",".join(stage.to_ffmpeg() for stage in self.stages)


def _fmt(value) -> str:
    if isinstance(value, str):
        return value
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.3f}".rstrip("0")


def _brightness(metric: ColorMetric) -> FilterStage:
    return FilterStage("brightness", "eq", {"brightness": round(metric.adjustment / 500, 3)})


def _contrast(metric: ColorMetric) -> FilterStage:
    return FilterStage("contrast", "eq", {"contrast": round(1 + metric.adjustment / 300, 3)})


def _saturation(metric: ColorMetric) -> FilterStage:
    return FilterStage("saturation", "eq", {"saturation": round(1 + metric.adjustment / 200, 3)})


def _color_temp(metric: ColorMetric) -> FilterStage:
    # positive adjustment warms: lift red shadows, cut blue shadows
    shift = round(metric.adjustment / 200, 3)
    return FilterStage("color_temp", "colorbalance", {"rs": shift, "bs": -shift})


def _sharpness(metric: ColorMetric) -> FilterStage:
    # negative amount blurs, used when the source is oversharpened
    amount = round(clamp(metric.adjustment / 15, -1.5, 1.5), 3)
    return FilterStage(
        "sharpness", "unsharp",
        {"luma_msize_x": 5, "luma_msize_y": 5, "luma_amount": amount,
         "chroma_msize_x": 5, "chroma_msize_y": 5, "chroma_amount": 0.0},
    )


def _noise(metric: ColorMetric) -> FilterStage:
    if metric.status == MetricStatus.LOW:
        return FilterStage("noise", "noise", {"alls": abs(int(metric.adjustment)), "allf": "t"})
    strength = min(1.0, abs(metric.adjustment) / 20)
    return FilterStage(
        "noise", "hqdn3d",
        {"luma_spatial": round(4 * strength, 3), "chroma_spatial": round(3 * strength, 3),
         "luma_tmp": round(6 * strength, 3), "chroma_tmp": round(4.5 * strength, 3)},
    )


_STAGE_BUILDERS = {
    "brightness": _brightness,
    "contrast": _contrast,
    "saturation": _saturation,
    "color_temp": _color_temp,
    "sharpness": _sharpness,
    "noise": _noise,
}


class ColorGradeBuilder:
    """
    Turns a ColorAnalysis into an ffmpeg filter chain and renders it.

    Stages are emitted in the order brightness, contrast, saturation,
    color temperature, sharpness, noise; normal metrics emit nothing.
    Rendering always writes a new file under the color-graded root.
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

    @staticmethod
    def build_filter_chain(analysis: ColorAnalysis) -> FilterChain:
        stages = [
            _STAGE_BUILDERS[name](metric)
            for name, metric in analysis.items()
            if metric.status != MetricStatus.NORMAL
        ]
        return FilterChain(stages)

    def build_args(
        self,
        input_path: str,
        output_path: str,
        chain: FilterChain,
        preview_only: bool = False,
        preview_duration: Optional[float] = None,
    ) -> List[str]:
        output_kwargs = {
            "vcodec": self.config.video_codec,
            "preset": self.config.preset,
            "crf": self.config.crf,
            "acodec": "copy",
            "movflags": "+faststart",
        }
        if chain:
            output_kwargs["vf"] = chain.to_ffmpeg()
        if self.config.video_bitrate:
            output_kwargs["b:v"] = self.config.video_bitrate
        if preview_only:
            if preview_duration is None:
                preview_duration = self.config.preview_duration
            if preview_duration <= 0:
                raise ValidationException(f"preview_duration must be positive, got {preview_duration}")
            output_kwargs["t"] = preview_duration

        return (
            ffmpeg
            .input(input_path)
            .output(output_path, **output_kwargs)
            .overwrite_output()
            .get_args()
        )

    async def apply(
        self,
        input_path: str,
        chain: FilterChain,
        preview_only: bool = False,
        preview_duration: Optional[float] = None,
    ) -> Path:
        """Render `chain` over the video into a fresh file and return its local path."""
        if not os.path.isfile(input_path):
            raise ResourceNotFoundException(f"Video not found: {input_path}")

        output_path = self.storage.color_graded_root / f"graded_{secrets.token_hex(8)}.mp4"
        args = self.build_args(input_path, str(output_path), chain, preview_only, preview_duration)
        logger.info(
            f"ColorGradeBuilder: grading {input_path} with [{chain.to_ffmpeg()}]"
            f"{' (preview)' if preview_only else ''}"
        )

        try:
            await self.runner.run(self.media_config.ffmpeg_path, args, self.media_config.grade_timeout)
        except BaseException:
            output_path.unlink(missing_ok=True)
            raise

        if not output_path.exists():
            raise ResourceNotFoundException(
                "Grading finished but no output file was written",
                details={"output_path": str(output_path)},
            )
        logger.info(f"ColorGradeBuilder: wrote {output_path}")
        return output_path

    async def apply_analysis(
        self,
        input_path: str,
        analysis: ColorAnalysis,
        preview_only: bool = False,
        preview_duration: Optional[float] = None,
    ) -> Path:
        return await self.apply(input_path, self.build_filter_chain(analysis), preview_only, preview_duration)

    def prune(self, max_age_seconds: float = 24 * 60 * 60) -> int:
        """Remove graded outputs older than `max_age_seconds`."""
        return self.storage.prune(self.storage.color_graded_root, max_age_seconds)
