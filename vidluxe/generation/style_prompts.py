"""
Prompt text for the generation styles.

Enhancement styles restyle a single frame; cover styles turn a keyframe
into a cover image.
"""

import re
from typing import Dict

from vidluxe.exceptions import ValidationException

TEXT_TO_IMAGE_SUFFIX = ", high quality photography, professional editing, magazine style"

ENHANCEMENT_STYLES: Dict[str, str] = {
    "magazine": """
        Vogue magazine editorial style, luxury fashion aesthetic,
        warm golden lighting, sophisticated and elegant,
        professional model photography, high-end beauty editorial,
        warm beige and champagne tones, cinematic background,
        soft studio lighting, premium quality, editorial composition
    """,
    "soft": """
        Japanese lifestyle magazine style, soft natural lighting,
        muted pastel colors, Kinfolk aesthetic, dreamy atmosphere,
        gentle and warm, artistic and refined, low saturation,
        earthy tones, natural and authentic, editorial quality
    """,
    "urban": """
        Apple keynote style, clean professional background,
        cool blue-gray tones, corporate executive aesthetic,
        modern minimalist, trustworthy and authoritative,
        soft diffused lighting, sharp details, premium corporate style
    """,
    "vintage": """
        Kodak Portra 400 film look, vintage aesthetic,
        warm film grain, cinematic color grading,
        nostalgic atmosphere, retro style, artistic,
        soft highlights, subtle vignette, analog photography feel
    """,
}

COVER_STYLES: Dict[str, str] = {
    "magazine": (
        "magazine cover style, high fashion photography, clean background, "
        "professional lighting, editorial look, premium quality"
    ),
    "warm": (
        "warm golden hour lighting, cozy atmosphere, soft tones, "
        "premium lifestyle photography, inviting mood"
    ),
    "cinematic": (
        "cinematic look, film color grading, moody atmosphere, "
        "professional cinematography, movie poster quality"
    ),
}


def _normalize(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _lookup(styles: Dict[str, str], style: str, kind: str) -> str:
    if style not in styles:
        raise ValidationException(
            f"Unknown {kind} style: {style}", details={"allowed": sorted(styles)}
        )
    return _normalize(styles[style])


def get_style_prompt(style: str) -> str:
    return _lookup(ENHANCEMENT_STYLES, style, "enhancement")


def get_cover_prompt(style: str) -> str:
    return _lookup(COVER_STYLES, style, "cover")


def text_to_image_prompt(prompt: str) -> str:
    """Prompt used when no reference image can be sent."""
    return prompt + TEXT_TO_IMAGE_SUFFIX
