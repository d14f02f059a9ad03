"""
Data models for keyframe extraction.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SampledFrame:
    """A still frame written to disk by one extraction session."""
    local_path: str
    timestamp: float
    session_id: Optional[str] = None


@dataclass(frozen=True)
class FrameDetails:
    """Sub-scores behind a composite frame score."""
    sharpness: int
    composition: int
    brightness: int
    has_face: bool


@dataclass(frozen=True)
class FrameScore:
    """A scored keyframe, ready for cover selection."""
    url: str
    local_path: str
    timestamp: float
    score: int
    details: FrameDetails
    session_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
