from typing import Optional

from loguru import logger

from vidluxe.config import KeyframeConfig
from vidluxe.keyframes.frame_features import (
    FaceDetector,
    FrameFeatureExtractor,
    PathHashBrightness,
    PathHashComposition,
    PathHashFaceDetector,
    build_sharpness_extractor,
)
from vidluxe.keyframes.models import FrameDetails, FrameScore, SampledFrame
from vidluxe.media.storage import MediaStorage
from vidluxe.utils.helper import clamp, round_half_up

SHARPNESS_WEIGHT = 0.4
COMPOSITION_WEIGHT = 0.3
BRIGHTNESS_WEIGHT = 0.2
FACE_BONUS = 15
BRIGHTNESS_BONUS = 5
BRIGHTNESS_BONUS_RANGE = (60, 85)


def composite_score(sharpness: float, composition: float, brightness: float, has_face: bool) -> int:
    """Weighted sum plus face and well-exposed bonuses, clamped to 0-100."""
    score = (
        SHARPNESS_WEIGHT * sharpness
        + COMPOSITION_WEIGHT * composition
        + BRIGHTNESS_WEIGHT * brightness
    )
    if has_face:
        score += FACE_BONUS
    low, high = BRIGHTNESS_BONUS_RANGE
    if low <= brightness <= high:
        score += BRIGHTNESS_BONUS
    return int(round_half_up(clamp(score, 0, 100)))


class FrameScorer:
    """
    Scores one extracted frame.

    Each sub-score comes from a pluggable FrameFeatureExtractor so the
    ranking stays the same when a heuristic is swapped for a real model.
    """

    def __init__(
        self,
        storage: Optional[MediaStorage] = None,
        config: Optional[KeyframeConfig] = None,
        sharpness: Optional[FrameFeatureExtractor] = None,
        composition: Optional[FrameFeatureExtractor] = None,
        brightness: Optional[FrameFeatureExtractor] = None,
        face_detector: Optional[FaceDetector] = None,
    ):
        self.config = config or KeyframeConfig()
        self.storage = storage or MediaStorage()
        self.sharpness = sharpness or build_sharpness_extractor(self.config.sharpness_method)
        self.composition = composition or PathHashComposition()
        self.brightness = brightness or PathHashBrightness()
        self.face_detector = face_detector or PathHashFaceDetector()

    def score(self, frame: SampledFrame) -> FrameScore:
        path = frame.local_path
        sharpness = self.sharpness.extract(path)
        composition = self.composition.extract(path)
        brightness = self.brightness.extract(path)
        has_face = self.face_detector.has_face(path)

        score = composite_score(sharpness, composition, brightness, has_face)
        logger.debug(
            f"FrameScorer: t={frame.timestamp}s score={score} "
            f"(sharpness={sharpness:.1f}, composition={composition:.0f}, "
            f"brightness={brightness:.0f}, face={has_face})"
        )
        return FrameScore(
            url=self.storage.to_url(path),
            local_path=path,
            timestamp=frame.timestamp,
            score=score,
            details=FrameDetails(
                sharpness=int(round_half_up(sharpness)),
                composition=int(round_half_up(composition)),
                brightness=int(round_half_up(brightness)),
                has_face=has_face,
            ),
            session_id=frame.session_id,
        )
