from .cover_service import CoverService
from .frame_replacer import FrameReplacement, FrameReplacer, ReplacementResult

__all__ = ["CoverService", "FrameReplacement", "FrameReplacer", "ReplacementResult"]
