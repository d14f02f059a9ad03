import json
from pathlib import Path
from typing import Callable, Iterable, Optional

import cv2
import numpy as np
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from vidluxe.config import MediaConfig, StorageConfig
from vidluxe.exceptions import ProcessFailedException, TimeoutException
from vidluxe.media.process_runner import ProcessResult
from vidluxe.media.storage import MediaStorage


def noise_frame(timestamp: float, width: int = 64, height: int = 96) -> np.ndarray:
    """Random texture whose amplitude grows with the timestamp, so JPEG sizes differ per frame."""
    rng = np.random.default_rng(int(timestamp * 1000))
    amplitude = 20 + int(timestamp * 20) % 200
    base = np.full((height, width, 3), 100, dtype=np.int16)
    noise = rng.integers(-amplitude // 2, amplitude // 2 + 1, size=base.shape)
    return np.clip(base + noise, 0, 255).astype(np.uint8)


def gray_frame(timestamp: float, value: int = 128, width: int = 64, height: int = 96) -> np.ndarray:
    return np.full((height, width, 3), value, dtype=np.uint8)


class FakeRunner:
    """
    Stands in for ProcessRunner: answers ffprobe queries from canned values
    and makes ffmpeg "write" its output file.
    """

    def __init__(
        self,
        duration: Optional[float] = 10.0,
        width: int = 720,
        height: int = 1280,
        rate: str = "30000/1001",
        frame_factory: Callable[[float], np.ndarray] = noise_frame,
        fail_at: Iterable[float] = (),
        timeout_at: Iterable[float] = (),
        banner: str = "",
        config: Optional[MediaConfig] = None,
    ):
        self.config = config or MediaConfig()
        self.duration = duration
        self.width = width
        self.height = height
        self.rate = rate
        self.frame_factory = frame_factory
        self.fail_at = set(fail_at)
        self.timeout_at = set(timeout_at)
        self.banner = banner
        self.calls = []

    async def run(self, binary_path, args, timeout):
        args = [str(a) for a in args]
        self.calls.append((binary_path, args, timeout))
        if binary_path == self.config.ffprobe_path:
            return self._ffprobe(args)
        return self._ffmpeg(args)

    @property
    def ffmpeg_calls(self):
        return [args for binary, args, _ in self.calls if binary == self.config.ffmpeg_path]

    def _ffprobe(self, args):
        if "format=duration" in args:
            if self.duration is None:
                raise ProcessFailedException("ffprobe exited with code 1", exit_code=1, stderr_tail="")
            return ProcessResult(args, 0, f"{self.duration}\n", "")
        stream = {"width": self.width, "height": self.height, "r_frame_rate": self.rate}
        return ProcessResult(args, 0, json.dumps({"streams": [stream]}), "")

    def _ffmpeg(self, args):
        if "-hide_banner" in args:
            raise ProcessFailedException("ffmpeg exited with code 1", exit_code=1, stderr_tail=self.banner)

        timestamp = float(args[args.index("-ss") + 1]) if "-ss" in args else 0.0
        if timestamp in self.timeout_at:
            raise TimeoutException(f"ffmpeg timed out at {timestamp}")
        if timestamp in self.fail_at:
            raise ProcessFailedException("ffmpeg exited with code 1", exit_code=1, stderr_tail="seek failed")

        output = [a for a in args if a.endswith((".jpg", ".png", ".mp4"))][-1]
        if output.endswith(".jpg"):
            cv2.imwrite(output, self.frame_factory(timestamp))
        else:
            Path(output).write_bytes(b"\x00" * 32)
        return ProcessResult(args, 0, "", "")


@pytest.fixture
def storage(tmp_path) -> MediaStorage:
    return MediaStorage(StorageConfig(public_root=str(tmp_path / "public"), public_base_url="https://cdn.example.com"))


@pytest.fixture
def video_file(storage) -> Path:
    """An (empty) uploaded video under the public uploads root."""
    path = storage.uploads_root / "videos" / "clip.mp4"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x00" * 64)
    return path


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 128


@pytest.fixture
async def file_server():
    """
    Serves `/files/<name>.png` with PNG_BYTES and `/truncated.png` with a body
    that ends after 1 KB of a promised 100 KB.
    """

    async def image(request):
        return web.Response(body=PNG_BYTES, content_type="image/png")

    async def truncated(request):
        response = web.StreamResponse(headers={"Content-Type": "image/png", "Content-Length": "100000"})
        await response.prepare(request)
        await response.write(b"\x00" * 1024)
        request.transport.close()
        return response

    app = web.Application()
    app.router.add_get("/files/{name}", image)
    app.router.add_get("/truncated.png", truncated)
    server = TestServer(app)
    await server.start_server()
    yield server
    await server.close()
