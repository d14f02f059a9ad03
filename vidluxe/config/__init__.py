from .settings import (
    TargetBand,
    MediaConfig,
    StorageConfig,
    KeyframeConfig,
    ColorConfig,
    GenerationConfig,
    LoggingConfig,
    VidLuxeConfig,
)

__all__ = [
    "TargetBand",
    "MediaConfig",
    "StorageConfig",
    "KeyframeConfig",
    "ColorConfig",
    "GenerationConfig",
    "LoggingConfig",
    "VidLuxeConfig",
]
