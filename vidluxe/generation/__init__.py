from .task_client import ExternalTaskClient, ExternalTask, TaskStatus
from .orchestrator import EnhancementOrchestrator, BatchResult, BatchItemResult
from .style_prompts import get_style_prompt, get_cover_prompt, text_to_image_prompt

__all__ = [
    "ExternalTaskClient",
    "ExternalTask",
    "TaskStatus",
    "EnhancementOrchestrator",
    "BatchResult",
    "BatchItemResult",
    "get_style_prompt",
    "get_cover_prompt",
    "text_to_image_prompt",
]
