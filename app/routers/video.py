from fastapi import APIRouter, Depends
from schemas.video import (
    AnalyzeResponse,
    ColorGradeRequest,
    ColorGradeResponse,
    EmbedCoverRequest,
    EmbedCoverResponse,
    EnhanceCoverRequest,
    EnhanceCoverResponse,
    EnhanceFramesRequest,
    EnhanceFramesResponse,
    ErrorResponse,
    KeyframesRequest,
    KeyframesResponse,
    ReplaceFramesRequest,
    ReplaceFramesResponse,
    VideoRequest,
)
from services import video_services
from services.video_services import VideoPipeline, get_pipeline

router = APIRouter(prefix="/video", tags=["video"], responses={
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
})


@router.post(
    "/keyframes",
    response_model=KeyframesResponse,
    summary="Extract and rank keyframes",
    description="Sample frames from an uploaded video and return the best candidates for a cover.",
)
async def keyframes(data: KeyframesRequest, pipeline: VideoPipeline = Depends(get_pipeline)):
    return await video_services.extract_keyframes(pipeline, data.model_dump())


@router.delete("/keyframes/{session_id}", summary="Delete the frames of one extraction session")
async def delete_keyframes(session_id: str, pipeline: VideoPipeline = Depends(get_pipeline)):
    return video_services.cleanup_keyframes(pipeline, session_id)


@router.post("/analyze", response_model=AnalyzeResponse, summary="Measure color metrics")
async def analyze(data: VideoRequest, pipeline: VideoPipeline = Depends(get_pipeline)):
    return await video_services.analyze_video(pipeline, data.model_dump())


@router.post("/color-grade", response_model=ColorGradeResponse, summary="Analyze and re-grade a video")
async def color_grade(data: ColorGradeRequest, pipeline: VideoPipeline = Depends(get_pipeline)):
    return await video_services.color_grade(pipeline, data.model_dump())


@router.post("/enhance-cover", response_model=EnhanceCoverResponse, summary="Generate a cover from a keyframe")
async def enhance_cover(data: EnhanceCoverRequest, pipeline: VideoPipeline = Depends(get_pipeline)):
    return await video_services.enhance_cover(pipeline, data.model_dump())


@router.post("/enhance-frames", response_model=EnhanceFramesResponse, summary="Restyle several frames")
async def enhance_frames(data: EnhanceFramesRequest, pipeline: VideoPipeline = Depends(get_pipeline)):
    return await video_services.enhance_frames(pipeline, data.model_dump())


@router.post("/embed-cover", response_model=EmbedCoverResponse, summary="Attach a cover image to a video")
async def embed_cover(data: EmbedCoverRequest, pipeline: VideoPipeline = Depends(get_pipeline)):
    return await video_services.embed_cover(pipeline, data.model_dump())


@router.post(
    "/replace-frames",
    response_model=ReplaceFramesResponse,
    summary="Write enhanced frames back into a video",
    description="Overlay each image at its timestamp. Frames that cannot be fetched are skipped.",
)
async def replace_frames(data: ReplaceFramesRequest, pipeline: VideoPipeline = Depends(get_pipeline)):
    return await video_services.replace_frames(pipeline, data.model_dump())
