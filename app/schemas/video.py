from typing import List, Optional

from pydantic import BaseModel, Field


class KeyframesRequest(BaseModel):
    video_url: str = Field(..., min_length=1, examples=["/uploads/videos/clip.mp4"])
    interval: Optional[float] = Field(None, gt=0, description="Seconds between sampled frames")
    top_n: Optional[int] = Field(None, ge=1, description="Number of ranked frames to return")


class FrameDetailsModel(BaseModel):
    sharpness: int
    composition: int
    brightness: int
    has_face: bool


class KeyframeModel(BaseModel):
    url: str
    timestamp: float
    score: int
    details: FrameDetailsModel


class VideoInfoModel(BaseModel):
    width: int
    height: int
    fps: int
    duration: float


class KeyframesResponse(BaseModel):
    success: bool = True
    session_id: Optional[str] = None
    keyframes: List[KeyframeModel]
    video_info: VideoInfoModel


class VideoRequest(BaseModel):
    video_url: str = Field(..., min_length=1, examples=["/uploads/videos/clip.mp4"])


class ColorMetricModel(BaseModel):
    value: float
    status: str
    adjustment: float


class ColorAnalysisModel(BaseModel):
    brightness: ColorMetricModel
    contrast: ColorMetricModel
    saturation: ColorMetricModel
    color_temp: ColorMetricModel
    sharpness: ColorMetricModel
    noise: ColorMetricModel


class AnalyzeResponse(BaseModel):
    success: bool = True
    analysis: ColorAnalysisModel
    explanation: str
    filter_chain: str


class ColorGradeRequest(VideoRequest):
    preview_only: bool = False
    preview_duration: Optional[float] = Field(None, gt=0)


class ColorGradeResponse(AnalyzeResponse):
    graded_video_url: str


class EnhanceCoverRequest(BaseModel):
    frame_url: str = Field(..., min_length=1)
    style: str = Field("magazine", examples=["magazine", "warm", "cinematic"])


class EnhanceCoverResponse(BaseModel):
    success: bool = True
    enhanced_url: str


class EnhanceFramesRequest(BaseModel):
    frame_urls: List[str] = Field(..., min_length=1)
    style: str = Field("magazine", examples=["magazine", "soft", "urban", "vintage"])


class EnhancedFrameModel(BaseModel):
    original_url: str
    success: bool
    enhanced_url: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


class EnhanceFramesResponse(BaseModel):
    success: bool = True
    results: List[EnhancedFrameModel]
    success_count: int
    failure_count: int


class EmbedCoverRequest(BaseModel):
    video_url: str = Field(..., min_length=1)
    cover_url: str = Field(..., min_length=1)


class EmbedCoverResponse(BaseModel):
    success: bool = True
    video_url: str


class ReplacementFrameModel(BaseModel):
    timestamp: float = Field(..., ge=0, description="Seconds into the video where the image is shown")
    image_url: str = Field(..., min_length=1)


class ReplaceFramesRequest(BaseModel):
    video_url: str = Field(..., min_length=1)
    frames: List[ReplacementFrameModel] = Field(..., min_length=1)


class ReplaceFramesResponse(BaseModel):
    success: bool = True
    video_url: str
    replaced_count: int
    skipped_count: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    error_code: str
