import asyncio
import contextlib
import os
from dataclasses import dataclass
from typing import List, Optional, Sequence

from loguru import logger

from vidluxe.config import MediaConfig
from vidluxe.exceptions import ProcessFailedException, SpawnException, TimeoutException

_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ProcessResult:
    """Captured output of a finished subprocess."""
    args: List[str]
    returncode: int
    stdout: str
    stderr: str


async def _drain(stream: asyncio.StreamReader, limit: Optional[int]) -> bytes:
    """Read a pipe to EOF, keeping at most the last `limit` bytes when a limit is set."""
    buffer = bytearray()
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)
        if limit is not None and len(buffer) > limit:
            del buffer[:-limit]
    return bytes(buffer)


class ProcessRunner:
    """
    Runs an external media binary as a child process with a hard timeout.

    - stdout is captured in full, stderr only as a bounded tail
    - a timeout kills the child and reaps it before TimeoutException is raised
    - the child is killed and reaped on every exit path, including cancellation
    - nothing is retried; callers decide whether to try again
    """

    def __init__(self, config: Optional[MediaConfig] = None) -> None:
        self.config = config or MediaConfig()

    async def run(self, binary_path: str, args: Sequence, timeout: float) -> ProcessResult:
        cmd = [str(binary_path)] + [str(a) for a in args]
        name = os.path.basename(str(binary_path))
        logger.debug(f"ProcessRunner: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SpawnException(
                f"Could not start {name}: {e}",
                details={"binary": str(binary_path), "original_exception": type(e).__name__},
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                self._communicate(process), timeout=timeout
            )
        except asyncio.TimeoutError:
            raise TimeoutException(
                f"{name} timed out after {timeout}s",
                details={"binary": str(binary_path), "timeout": timeout, "pid": process.pid},
            )
        finally:
            await self._terminate(process)

        stdout_text = stdout.decode("utf-8", errors="replace")
        stderr_text = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            logger.debug(f"--- {name} stderr ---\n{stderr_text.strip()}")
            raise ProcessFailedException(
                f"{name} exited with code {process.returncode}",
                exit_code=process.returncode,
                stderr_tail=stderr_text,
                details={"binary": str(binary_path)},
            )

        return ProcessResult(
            args=cmd,
            returncode=process.returncode,
            stdout=stdout_text,
            stderr=stderr_text,
        )

    async def _communicate(self, process: asyncio.subprocess.Process):
        stdout, stderr = await asyncio.gather(
            _drain(process.stdout, None),
            _drain(process.stderr, self.config.stderr_tail_bytes),
        )
        await process.wait()
        return stdout, stderr

    @staticmethod
    async def _terminate(process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        # Reap the child so no zombie outlives the call
        await process.wait()
