import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import aiohttp
from loguru import logger

from vidluxe.config import GenerationConfig
from vidluxe.exceptions import (
    ConfigurationException,
    ProviderException,
    TaskFailedException,
    TaskTimeoutException,
    TimeoutException,
    ValidationException,
)
from vidluxe.utils.error_handler import convert_exceptions


class TaskStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ExternalTask:
    """Snapshot of a remote generation task as last reported by the service."""
    id: str
    status: TaskStatus
    progress: int = 0
    results: List[str] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.FAILED)

    @classmethod
    def from_response(cls, data: Dict[str, Any], task_id: Optional[str] = None) -> "ExternalTask":
        try:
            status = TaskStatus(data.get("status", TaskStatus.PENDING.value))
        except ValueError:
            raise ProviderException(f"Unknown task status: {data.get('status')}", details={"response": data})
        progress = int(data.get("progress") or 0)
        return cls(
            id=str(data.get("id") or task_id or ""),
            status=status,
            progress=max(0, min(100, progress)),
            results=list(data.get("results") or []),
        )


class ExternalTaskClient:
    """
    Client for the remote image-generation service.

    Tasks move pending -> processing -> completed | failed, driven only by
    polling. `wait_for_completion` gives up after its own time budget with
    TaskTimeoutException; the remote task is left running.
    """

    def __init__(self, config: Optional[GenerationConfig] = None, session: Optional[aiohttp.ClientSession] = None):
        self.config = config or GenerationConfig()
        self.base_url = self.config.base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    def _headers(self) -> Dict[str, str]:
        if not self.config.api_key:
            raise ConfigurationException("GENERATION_API_KEY is not set")
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    @convert_exceptions({aiohttp.ClientError: ProviderException, ValueError: ProviderException})
    async def _request(self, method: str, path: str, timeout: float, payload: Optional[Dict] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = self._headers()
        try:
            async with self._get_session().request(
                method, url, json=payload, headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                if response.status >= 400:
                    raise ProviderException(
                        await self._error_message(response, f"{method} {path} failed"),
                        status_code=response.status,
                    )
                return await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise TimeoutException(
                f"{method} {path} timed out after {timeout}s", details={"url": url, "timeout": timeout}
            ) from e

    @staticmethod
    async def _error_message(response: aiohttp.ClientResponse, default: str) -> str:
        try:
            body = await response.json(content_type=None)
        except ValueError:
            return default
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return error["message"]
            if isinstance(error, str):
                return error
        return default

    async def create(self, prompt: str, image_urls: Optional[List[str]] = None) -> str:
        """Submit a generation task and return its id."""
        payload = {
            "model": self.config.model,
            "prompt": prompt,
            "size": self.config.size,
            "quality": self.config.quality,
        }
        if image_urls:
            payload["image_urls"] = list(image_urls)

        data = await self._request("POST", "/v1/images/generations", self.config.create_timeout, payload)
        task_id = data.get("id") if isinstance(data, dict) else None
        if not task_id:
            raise ProviderException("Generation service returned no task id", details={"response": data})
        logger.info(f"ExternalTaskClient: created task {task_id} ({'image-to-image' if image_urls else 'text-to-image'})")
        return task_id

    async def poll(self, task_id: str) -> ExternalTask:
        data = await self._request("GET", f"/v1/tasks/{task_id}", self.config.poll_request_timeout)
        if not isinstance(data, dict):
            raise ProviderException("Malformed task status response", details={"response": data})
        return ExternalTask.from_response(data, task_id)

    async def wait_for_completion(
        self,
        task_id: str,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> List[str]:
        """
        Poll until the task completes and return its result URLs.

        Args:
            task_id: Id returned by `create`
            poll_interval: Seconds between polls (fixed, no backoff)
            timeout: Overall wall-clock budget in seconds
            on_progress: Called with the remote progress after every poll

        Raises:
            TaskFailedException: the service reported failure, or completed without results
            TaskTimeoutException: the budget ran out before a terminal status
        """
        if poll_interval is None:
            poll_interval = self.config.poll_interval
        if timeout is None:
            timeout = self.config.total_timeout
        if poll_interval <= 0 or timeout <= 0:
            raise ValidationException(
                "poll_interval and timeout must be positive",
                details={"poll_interval": poll_interval, "timeout": timeout},
            )

        async def _poll_loop() -> List[str]:
            while True:
                try:
                    task = await self.poll(task_id)
                except TimeoutException as e:
                    # a slow status request is not a verdict on the task
                    logger.warning(f"ExternalTaskClient: poll of {task_id} timed out, retrying: {e}")
                    await asyncio.sleep(poll_interval)
                    continue

                if on_progress:
                    on_progress(task.progress)

                if task.status == TaskStatus.COMPLETED:
                    if not task.results:
                        raise TaskFailedException(
                            f"Task {task_id} completed without results", details={"task_id": task_id}
                        )
                    return task.results
                if task.status == TaskStatus.FAILED:
                    raise TaskFailedException(f"Task {task_id} failed", details={"task_id": task_id})

                await asyncio.sleep(poll_interval)

        try:
            results = await asyncio.wait_for(_poll_loop(), timeout)
        except asyncio.TimeoutError as e:
            raise TaskTimeoutException(
                f"Task {task_id} did not finish within {timeout}s",
                details={"task_id": task_id, "timeout": timeout},
            ) from e

        logger.info(f"ExternalTaskClient: task {task_id} completed with {len(results)} result(s)")
        return results
