import asyncio
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from vidluxe.config import GenerationConfig
from vidluxe.exceptions import ValidationException
from vidluxe.generation.style_prompts import get_style_prompt, text_to_image_prompt
from vidluxe.generation.task_client import ExternalTaskClient
from vidluxe.media.storage import MediaStorage
from vidluxe.utils.error_handler import ErrorHandler

ProgressCallback = Callable[[int, str], None]
BatchProgressCallback = Callable[[int, int], None]

# Remote progress is mapped into this band of the overall progress
_REMOTE_BAND = (25, 80)


@dataclass
class BatchItemResult:
    index: int
    source_url: str
    success: bool
    result_url: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


@dataclass
class BatchResult:
    items: List[BatchItemResult] = field(default_factory=list)
    total: int = 0
    completed_count: int = 0

    @property
    def success_count(self) -> int:
        return sum(1 for item in self.items if item.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for item in self.items if not item.success)

    @property
    def progress(self) -> float:
        """Fraction of items finished, success or not."""
        return self.completed_count / self.total if self.total else 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [asdict(item) for item in self.items],
            "total": self.total,
            "completed_count": self.completed_count,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
        }


class EnhancementOrchestrator:
    """
    Drives generation tasks for single and batch enhancement requests.

    Batches run at most `batch_concurrency` task lifecycles at once; one
    item's failure is recorded on that item and never aborts its siblings.
    """

    def __init__(
        self,
        client: Optional[ExternalTaskClient] = None,
        storage: Optional[MediaStorage] = None,
        config: Optional[GenerationConfig] = None,
    ):
        self.config = config or (client.config if client else GenerationConfig())
        self.client = client or ExternalTaskClient(self.config)
        self.storage = storage or MediaStorage()

    def reference_urls(self, image_url: Optional[str]) -> Optional[List[str]]:
        """The reference image list to send, or None when the service could not fetch it."""
        if not image_url:
            return None
        full_url = self.storage.to_full_url(image_url)
        if not self.storage.is_public_url(full_url):
            logger.info(f"EnhancementOrchestrator: {full_url} is not publicly reachable, using text-to-image")
            return None
        return [full_url]

    async def run(
        self,
        prompt: str,
        image_url: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Create one task for `prompt`, wait for it and return the first result URL."""
        def report(percent: int, stage: str):
            if on_progress:
                on_progress(percent, stage)

        image_urls = self.reference_urls(image_url)
        if image_urls is None:
            prompt = text_to_image_prompt(prompt)

        report(10, "creating")
        task_id = await self.client.create(prompt, image_urls)
        report(_REMOTE_BAND[0], "processing")

        low, high = _REMOTE_BAND
        results = await self.client.wait_for_completion(
            task_id,
            on_progress=lambda p: report(low + round(p * (high - low) / 100), "processing"),
        )
        report(100, "completed")
        return results[0]

    async def enhance(
        self,
        image_url: Optional[str],
        style: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        return await self.run(get_style_prompt(style), image_url, on_progress)

    async def enhance_batch(
        self,
        image_urls: Sequence[str],
        style: str,
        on_progress: Optional[BatchProgressCallback] = None,
        concurrency: Optional[int] = None,
    ) -> BatchResult:
        # Unknown style is a request error, not a per-item failure
        prompt = get_style_prompt(style)
        total = len(image_urls)
        batch = BatchResult(total=total)
        limit = self.config.batch_concurrency if concurrency is None else concurrency
        if limit < 1:
            raise ValidationException(f"concurrency must be at least 1, got {limit}")
        semaphore = asyncio.Semaphore(limit)

        async def _process(index: int, url: str) -> BatchItemResult:
            async with semaphore:
                try:
                    result_url = await self.run(prompt, url)
                    item = BatchItemResult(index=index, source_url=url, success=True, result_url=result_url)
                except Exception as e:
                    failure = ErrorHandler.to_result(e)
                    logger.warning(f"EnhancementOrchestrator: batch item {index} ({url}) failed: {failure['error']}")
                    item = BatchItemResult(
                        index=index, source_url=url, success=False,
                        error=failure["error"], error_code=failure["error_code"],
                    )
            batch.completed_count += 1
            if on_progress:
                on_progress(batch.completed_count, total)
            return item

        logger.info(f"EnhancementOrchestrator: batch of {total} ({style}), concurrency {limit}")
        batch.items = list(await asyncio.gather(*(_process(i, url) for i, url in enumerate(image_urls))))
        logger.info(
            f"EnhancementOrchestrator: batch done, {batch.success_count} succeeded, {batch.failure_count} failed"
        )
        return batch
