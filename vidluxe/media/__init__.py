"""Subprocess execution, probing and file layout for media files."""

from .process_runner import ProcessRunner, ProcessResult
from .media_probe import MediaProbe, MediaInfo
from .storage import MediaStorage
from .download import download_file

__all__ = [
    "ProcessRunner",
    "ProcessResult",
    "MediaProbe",
    "MediaInfo",
    "MediaStorage",
    "download_file",
]
