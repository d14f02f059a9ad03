import re
import secrets
import shutil
import time
from pathlib import Path
from typing import Optional, Tuple

from loguru import logger

from vidluxe.config import StorageConfig
from vidluxe.exceptions import ValidationException

_UNSAFE_CHARS = re.compile(r"[;&|`$(){}\[\]<>]")
_SESSION_ID = re.compile(r"[0-9a-f]{16}")
_DEFAULT_BASE_URL = "http://localhost:3000"


class MediaStorage:
    """
    Local file-system layout for generated media.

    Every file lives under `<public_root>/<url_prefix>/...` and is handed to
    callers as a web-relative URL beginning with `url_prefix`, which
    `to_local_path` resolves back to the file.
    """

    def __init__(self, config: Optional[StorageConfig] = None) -> None:
        self.config = config or StorageConfig()
        self.public_root = Path(self.config.public_root).resolve()
        self.url_prefix = "/" + self.config.url_prefix.strip("/")
        self.uploads_root = self.public_root / self.url_prefix.lstrip("/")

    def _dir(self, sub: str) -> Path:
        path = self.uploads_root / sub
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def keyframes_root(self) -> Path:
        return self._dir(self.config.keyframes_dir)

    @property
    def color_analysis_root(self) -> Path:
        return self._dir(self.config.color_analysis_dir)

    @property
    def color_graded_root(self) -> Path:
        return self._dir(self.config.color_graded_dir)

    @property
    def with_cover_root(self) -> Path:
        return self._dir(self.config.with_cover_dir)

    @property
    def replaced_root(self) -> Path:
        return self._dir(self.config.replaced_dir)

    @property
    def replace_frames_root(self) -> Path:
        return self._dir(self.config.replace_frames_dir)

    @property
    def covers_root(self) -> Path:
        return self._dir(self.config.covers_dir)

    # ------------------------------------------------------------------
    # URL <-> path mapping
    # ------------------------------------------------------------------
    def to_url(self, local_path) -> str:
        resolved = Path(local_path).resolve()
        try:
            relative = resolved.relative_to(self.public_root)
        except ValueError:
            raise ValidationException(
                f"Path is outside the public root: {local_path}",
                details={"public_root": str(self.public_root)},
            )
        return "/" + relative.as_posix()

    def to_local_path(self, url: str) -> Path:
        if not url or not url.startswith(self.url_prefix + "/"):
            raise ValidationException(f"URL must start with {self.url_prefix}/: {url}")
        if _UNSAFE_CHARS.search(url):
            raise ValidationException(f"Invalid characters in URL: {url}")

        resolved = (self.public_root / url.lstrip("/")).resolve()
        if not resolved.is_relative_to(self.uploads_root):
            raise ValidationException(f"Path traversal detected: {url}")
        return resolved

    def to_full_url(self, url: str) -> str:
        if url.startswith("http://") or url.startswith("https://"):
            return url
        base_url = (self.config.public_base_url or _DEFAULT_BASE_URL).rstrip("/")
        normalized = url if url.startswith("/") else f"/{url}"
        return f"{base_url}{normalized}"

    @staticmethod
    def is_public_url(url: str) -> bool:
        """Whether a remote service can fetch the URL (https, not localhost)."""
        return url.startswith("https://") and "localhost" not in url

    # ------------------------------------------------------------------
    # Sessions and housekeeping
    # ------------------------------------------------------------------
    @staticmethod
    def new_session_id() -> str:
        return secrets.token_hex(8)

    def new_session_dir(self, root: Path) -> Tuple[str, Path]:
        session_id = self.new_session_id()
        session_dir = root / session_id
        session_dir.mkdir(parents=True, exist_ok=True)
        return session_id, session_dir

    def session_dir(self, root: Path, session_id: str) -> Path:
        if not _SESSION_ID.fullmatch(session_id or ""):
            raise ValidationException(f"Invalid session id: {session_id}")
        return root / session_id

    def remove_session(self, root: Path, session_id: str) -> bool:
        """Delete a session directory. Returns False if it did not exist."""
        session_dir = self.session_dir(root, session_id)
        if not session_dir.exists():
            return False
        shutil.rmtree(session_dir, ignore_errors=True)
        logger.info(f"MediaStorage: cleaned up session {session_id} in {root.name}")
        return True

    def prune(self, root: Path, max_age_seconds: float = 24 * 60 * 60) -> int:
        """Delete files under `root` older than `max_age_seconds`. Returns the number removed."""
        now = time.time()
        removed = 0
        for path in root.iterdir():
            if not path.is_file():
                continue
            try:
                if now - path.stat().st_mtime > max_age_seconds:
                    path.unlink()
                    removed += 1
            except OSError as e:
                logger.warning(f"MediaStorage: could not remove {path}: {e}")
        if removed:
            logger.info(f"MediaStorage: pruned {removed} old files from {root}")
        return removed
