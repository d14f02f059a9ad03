"""
Pixel statistics shared by frame scoring and color analysis.

All scores are on a 0-100 scale so they can be compared against the
target bands in ColorConfig.
"""

import math
from typing import Dict

import cv2
import numpy as np

from vidluxe.utils.helper import clamp


def load_image(path: str) -> np.ndarray:
    """Read an image as a BGR uint8 array."""
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise ValueError(f"Cannot read image: {path}")
    return image


def to_luma(image: np.ndarray) -> np.ndarray:
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def brightness_score(gray: np.ndarray) -> float:
    """Mean luma."""
    return float(np.mean(gray)) / 255.0 * 100.0


def contrast_score(gray: np.ndarray) -> float:
    """Luma standard deviation relative to half the dynamic range."""
    return clamp(float(np.std(gray)) / 127.5 * 100.0, 0.0, 100.0)


def saturation_score(image: np.ndarray) -> float:
    """Mean HSV saturation (chroma magnitude)."""
    hsv = cv2.cvtColor(image, cv2.COLOR_BGR2HSV)
    return float(np.mean(hsv[..., 1])) / 255.0 * 100.0


def color_temp_score(image: np.ndarray) -> float:
    """50 is neutral; above 50 the red channel dominates blue (warm), below it is cool."""
    blue = float(np.mean(image[..., 0]))
    red = float(np.mean(image[..., 2]))
    return clamp(50.0 + (red - blue) / 255.0 * 50.0, 0.0, 100.0)


def sharpness_score(gray: np.ndarray) -> float:
    """High-frequency energy: log-scaled variance of the Laplacian."""
    variance = float(cv2.Laplacian(gray, cv2.CV_64F).var())
    return clamp(25.0 * math.log10(1.0 + variance), 0.0, 100.0)


def noise_score(gray: np.ndarray) -> float:
    """Mean residual between the frame and its 3x3 median, i.e. pixel-level variance a denoiser would remove."""
    smoothed = cv2.medianBlur(gray, 3)
    residual = np.abs(gray.astype(np.int16) - smoothed.astype(np.int16))
    return clamp(float(np.mean(residual)) * 10.0, 0.0, 100.0)


def measure(image: np.ndarray) -> Dict[str, float]:
    """All six color metrics for one BGR frame."""
    gray = to_luma(image)
    return {
        "brightness": brightness_score(gray),
        "contrast": contrast_score(gray),
        "saturation": saturation_score(image),
        "color_temp": color_temp_score(image),
        "sharpness": sharpness_score(gray),
        "noise": noise_score(gray),
    }
