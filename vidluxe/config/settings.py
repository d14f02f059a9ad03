from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, PrivateAttr
from typing import Optional
from dotenv import load_dotenv, find_dotenv


class TargetBand(BaseModel):
    """Acceptable range for one color metric, with the value grading aims for."""

    min: float
    max: float
    optimal: float
    max_adjustment: float


class MediaConfig(BaseSettings):
    """External media binaries and subprocess time budgets."""

    ffmpeg_path: str = Field(default="ffmpeg")
    ffprobe_path: str = Field(default="ffprobe")
    probe_timeout: float = Field(default=10.0)
    frame_timeout: float = Field(default=10.0)
    grade_timeout: float = Field(default=300.0)
    embed_timeout: float = Field(default=30.0)
    replace_timeout: float = Field(default=300.0)
    overlay_duration: float = Field(default=0.1, gt=0)
    stderr_tail_bytes: int = Field(default=4096)

    # Substituted when probing fails; downstream code must tolerate them
    default_width: int = Field(default=1080)
    default_height: int = Field(default=1920)
    default_fps: int = Field(default=30)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class StorageConfig(BaseSettings):
    """File-system layout for generated media and its web-relative URLs."""

    public_root: str = Field(default="./public")
    url_prefix: str = Field(default="/uploads")
    keyframes_dir: str = Field(default="keyframes")
    color_analysis_dir: str = Field(default="color-analysis")
    color_graded_dir: str = Field(default="videos/color-graded")
    with_cover_dir: str = Field(default="videos/with-cover")
    replaced_dir: str = Field(default="videos/replaced")
    replace_frames_dir: str = Field(default="replace-frames")
    covers_dir: str = Field(default="covers")
    public_base_url: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STORAGE_",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class KeyframeConfig(BaseSettings):
    """Keyframe sampling and ranking parameters."""

    extract_interval: float = Field(default=2.0, gt=0)
    max_frames: int = Field(default=20, gt=0)
    top_frames: int = Field(default=10, gt=0)
    jpeg_quality: int = Field(default=2, ge=1, le=31)
    sharpness_method: str = Field(default="file_size", pattern="^(file_size|laplacian)$")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="KEYFRAME_",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class ColorConfig(BaseSettings):
    """Color analysis target bands and grading encode settings."""

    sample_frames: int = Field(default=5, ge=1)
    edge_margin: float = Field(default=0.05, ge=0, lt=0.5)

    brightness: TargetBand = TargetBand(min=40, max=70, optimal=55, max_adjustment=15)
    contrast: TargetBand = TargetBand(min=35, max=65, optimal=50, max_adjustment=20)
    saturation: TargetBand = TargetBand(min=30, max=60, optimal=45, max_adjustment=25)
    color_temp: TargetBand = TargetBand(min=40, max=60, optimal=50, max_adjustment=20)
    sharpness: TargetBand = TargetBand(min=50, max=100, optimal=75, max_adjustment=15)
    noise: TargetBand = TargetBand(min=0, max=30, optimal=10, max_adjustment=20)

    video_codec: str = Field(default="libx264")
    preset: str = Field(default="fast")
    crf: int = Field(default=23, ge=0, le=51)
    video_bitrate: Optional[str] = Field(default=None)
    preview_duration: float = Field(default=3.0, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COLOR_",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class GenerationConfig(BaseSettings):
    """Remote image-generation service configuration."""

    api_key: Optional[str] = Field(default=None)
    base_url: str = Field(default="https://api.evolink.ai")
    model: str = Field(default="nano-banana-2-lite")
    size: str = Field(default="9:16")
    quality: str = Field(default="2K")
    create_timeout: float = Field(default=30.0, gt=0)
    poll_request_timeout: float = Field(default=10.0, gt=0)
    poll_interval: float = Field(default=2.0, gt=0)
    total_timeout: float = Field(default=120.0, gt=0)
    batch_concurrency: int = Field(default=3, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GENERATION_",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    enable_json: bool = Field(default=False)
    enable_file_logging: bool = Field(default=False)
    max_file_size: str = Field(default="10 MB")
    retention_days: int = Field(default=7)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LOG_",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )


class VidLuxeConfig(BaseSettings):
    """Main configuration class."""

    app_name: str = Field(default="VidLuxe")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False
    )

    _media: Optional[MediaConfig] = PrivateAttr(default=None)
    _storage: Optional[StorageConfig] = PrivateAttr(default=None)
    _keyframes: Optional[KeyframeConfig] = PrivateAttr(default=None)
    _color: Optional[ColorConfig] = PrivateAttr(default=None)
    _generation: Optional[GenerationConfig] = PrivateAttr(default=None)
    _logging: Optional[LoggingConfig] = PrivateAttr(default=None)

    def __init__(self, **kwargs):
        # Force load environment variables before initializing
        load_dotenv(find_dotenv())
        super().__init__(**kwargs)

    @property
    def media(self) -> MediaConfig:
        if self._media is None:
            self._media = MediaConfig()
        return self._media

    @property
    def storage(self) -> StorageConfig:
        if self._storage is None:
            self._storage = StorageConfig()
        return self._storage

    @property
    def keyframes(self) -> KeyframeConfig:
        if self._keyframes is None:
            self._keyframes = KeyframeConfig()
        return self._keyframes

    @property
    def color(self) -> ColorConfig:
        if self._color is None:
            self._color = ColorConfig()
        return self._color

    @property
    def generation(self) -> GenerationConfig:
        if self._generation is None:
            self._generation = GenerationConfig()
        return self._generation

    @property
    def logging(self) -> LoggingConfig:
        if self._logging is None:
            self._logging = LoggingConfig()
        return self._logging
