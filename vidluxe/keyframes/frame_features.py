from abc import ABC, abstractmethod
import os

from vidluxe.media import image_stats
from vidluxe.utils.helper import stable_hash_int


class FrameFeatureExtractor(ABC):
    """Abstract base class for a single 0-100 frame quality feature."""

    name: str = "feature"

    @abstractmethod
    def extract(self, frame_path: str) -> float:
        """Compute the feature for the frame stored at `frame_path`."""
        pass


class FaceDetector(ABC):
    """Abstract base class for face presence detection."""

    @abstractmethod
    def has_face(self, frame_path: str) -> bool:
        """Whether the frame contains a face."""
        pass


def sharpness_from_kilobytes(kb: float) -> float:
    """
    Map JPEG size to a sharpness score.

    Detailed frames compress worse, so file size is a cheap proxy for edge
    content. Piecewise linear, continuous and monotonic: raw KB up to 50,
    then 50-70 over 50-100 KB, 70-90 over 100-200 KB, saturating at 100.
    """
    if kb > 200:
        return 90 + min(10.0, (kb - 200) / 50)
    if kb > 100:
        return 70 + (kb - 100) / 5
    if kb > 50:
        return 50 + (kb - 50) * 0.4
    return max(0.0, kb)


class FileSizeSharpness(FrameFeatureExtractor):
    name = "sharpness"

    def extract(self, frame_path: str) -> float:
        return sharpness_from_kilobytes(os.path.getsize(frame_path) / 1024)


class LaplacianSharpness(FrameFeatureExtractor):
    """Sharpness from pixel content (log-scaled Laplacian variance)."""

    name = "sharpness"

    def extract(self, frame_path: str) -> float:
        gray = image_stats.to_luma(image_stats.load_image(frame_path))
        return image_stats.sharpness_score(gray)


# Path-hash heuristics: deterministic per path but blind to content.
# They stand in until content-aware extractors are plugged in.

class PathHashComposition(FrameFeatureExtractor):
    name = "composition"

    def extract(self, frame_path: str) -> float:
        return float(60 + stable_hash_int(frame_path) % 35)


class PathHashBrightness(FrameFeatureExtractor):
    name = "brightness"

    def extract(self, frame_path: str) -> float:
        return float(50 + stable_hash_int(frame_path + "brightness") % 45)


class PathHashFaceDetector(FaceDetector):

    def has_face(self, frame_path: str) -> bool:
        return stable_hash_int(frame_path + "face") % 10 < 6


def build_sharpness_extractor(method: str) -> FrameFeatureExtractor:
    """Factory for the configured sharpness method."""
    if method == "laplacian":
        return LaplacianSharpness()
    if method == "file_size":
        return FileSizeSharpness()
    raise ValueError(f"Unsupported sharpness method: {method}")
