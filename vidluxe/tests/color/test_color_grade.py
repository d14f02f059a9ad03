"""
Test suite for ColorGradeBuilder filter synthesis and rendering.
"""

from dataclasses import replace

import pytest

from conftest import FakeRunner
from vidluxe.color.color_analyzer import default_analysis
from vidluxe.color.color_grade import ColorGradeBuilder
from vidluxe.color.models import ColorMetric, MetricStatus
from vidluxe.exceptions import ResourceNotFoundException, ValidationException


def low(adjustment):
    return ColorMetric(value=10, status=MetricStatus.LOW, adjustment=adjustment)


def high(adjustment):
    return ColorMetric(value=90, status=MetricStatus.HIGH, adjustment=adjustment)


ALL_OFF = replace(
    default_analysis(),
    brightness=low(10),
    contrast=high(-6),
    saturation=low(20),
    color_temp=low(8),
    sharpness=low(12),
    noise=high(-10),
)


def test_normal_analysis_yields_null_chain():
    chain = ColorGradeBuilder.build_filter_chain(default_analysis())

    assert len(chain) == 0
    assert chain.to_ffmpeg() == "null"


def test_stage_order_and_values():
    chain = ColorGradeBuilder.build_filter_chain(ALL_OFF)

    assert [stage.metric for stage in chain.stages] == [
        "brightness", "contrast", "saturation", "color_temp", "sharpness", "noise",
    ]
    assert chain.to_ffmpeg() == (
        "eq=brightness=0.02,"
        "eq=contrast=0.98,"
        "eq=saturation=1.1,"
        "colorbalance=rs=0.04:bs=-0.04,"
        "unsharp=5:5:0.8:5:5:0,"
        "hqdn3d=2:1.5:3:2.25"
    )


@pytest.mark.parametrize("name", ["brightness", "contrast", "saturation", "color_temp", "sharpness", "noise"])
def test_only_non_normal_metrics_emit_a_stage(name):
    analysis = replace(default_analysis(), **{name: low(5)})
    chain = ColorGradeBuilder.build_filter_chain(analysis)

    assert [stage.metric for stage in chain.stages] == [name]


def test_stage_parameters_are_deterministic():
    first = ColorGradeBuilder.build_filter_chain(ALL_OFF).to_ffmpeg()
    second = ColorGradeBuilder.build_filter_chain(ALL_OFF).to_ffmpeg()
    assert first == second


def test_cool_footage_is_warmed():
    chain = ColorGradeBuilder.build_filter_chain(replace(default_analysis(), color_temp=low(10)))
    params = chain.stages[0].params

    assert params["rs"] > 0 > params["bs"]


def test_build_args_preview(storage):
    builder = ColorGradeBuilder(storage, FakeRunner())
    chain = builder.build_filter_chain(ALL_OFF)

    args = builder.build_args("/in.mp4", "/out.mp4", chain, preview_only=True)

    assert args[:2] == ["-i", "/in.mp4"]
    assert args[args.index("-t") + 1] == "3.0"
    assert args[args.index("-vf") + 1] == chain.to_ffmpeg()
    assert args[args.index("-crf") + 1] == "23"
    assert args[args.index("-acodec") + 1] == "copy"
    assert args[-2:] == ["/out.mp4", "-y"]


def test_build_args_rejects_zero_preview_duration(storage):
    builder = ColorGradeBuilder(storage, FakeRunner())

    with pytest.raises(ValidationException):
        builder.build_args("/in.mp4", "/out.mp4", builder.build_filter_chain(ALL_OFF), True, 0)


def test_build_args_full_render_has_no_duration_limit(storage):
    builder = ColorGradeBuilder(storage, FakeRunner())
    args = builder.build_args("/in.mp4", "/out.mp4", builder.build_filter_chain(default_analysis()))

    assert "-t" not in args
    assert "-vf" not in args


async def test_apply_writes_fresh_output(storage, video_file):
    runner = FakeRunner()
    builder = ColorGradeBuilder(storage, runner)
    chain = builder.build_filter_chain(ALL_OFF)

    first = await builder.apply(str(video_file), chain, preview_only=True, preview_duration=2)
    second = await builder.apply(str(video_file), chain)

    assert first != second
    assert first.exists() and second.exists()
    assert first.parent == storage.color_graded_root
    assert first.name.startswith("graded_")
    assert video_file.read_bytes() == b"\x00" * 64
    assert runner.calls[0][2] == builder.media_config.grade_timeout


async def test_apply_missing_input(storage):
    builder = ColorGradeBuilder(storage, FakeRunner())

    with pytest.raises(ResourceNotFoundException):
        await builder.apply("/nope/missing.mp4", builder.build_filter_chain(ALL_OFF))
