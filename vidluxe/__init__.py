"""
VidLuxe: keyframe ranking, color grading and AI cover generation for short videos.
"""

from vidluxe.config import VidLuxeConfig
from vidluxe.media import MediaProbe, MediaStorage, ProcessRunner
from vidluxe.keyframes import KeyframeExtractor, FrameScorer, FrameSampler
from vidluxe.color import ColorAnalyzer, ColorGradeBuilder
from vidluxe.generation import ExternalTaskClient, EnhancementOrchestrator
from vidluxe.cover import CoverService, FrameReplacer

__version__ = "1.0.0"

__all__ = [
    "VidLuxeConfig",
    "ProcessRunner",
    "MediaProbe",
    "MediaStorage",
    "FrameSampler",
    "FrameScorer",
    "KeyframeExtractor",
    "ColorAnalyzer",
    "ColorGradeBuilder",
    "ExternalTaskClient",
    "EnhancementOrchestrator",
    "CoverService",
    "FrameReplacer",
]
