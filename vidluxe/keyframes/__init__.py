from .models import SampledFrame, FrameDetails, FrameScore
from .frame_features import (
    FrameFeatureExtractor,
    FaceDetector,
    FileSizeSharpness,
    LaplacianSharpness,
    PathHashComposition,
    PathHashBrightness,
    PathHashFaceDetector,
)
from .frame_sampler import FrameSampler, compute_timestamps
from .frame_scorer import FrameScorer, composite_score
from .keyframe_extractor import KeyframeExtractor

__all__ = [
    "SampledFrame",
    "FrameDetails",
    "FrameScore",
    "FrameFeatureExtractor",
    "FaceDetector",
    "FileSizeSharpness",
    "LaplacianSharpness",
    "PathHashComposition",
    "PathHashBrightness",
    "PathHashFaceDetector",
    "FrameSampler",
    "compute_timestamps",
    "FrameScorer",
    "composite_score",
    "KeyframeExtractor",
]
