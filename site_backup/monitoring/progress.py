"""
Progress reporting for backup operations.

Orchestrators push discrete TransferProgress events to a caller-supplied
sink. Percentages are allocated to stages as fixed bands so a caller can
render a bar that only moves forward.
"""

from typing import Callable, List, Optional

from site_backup.models.backup import ProgressStep, TransferProgress
from site_backup.utils.logging import get_logger

logger = get_logger("monitoring.progress")

ProgressCallback = Callable[[TransferProgress], None]


def band(start: float, end: float, processed: int, total: int) -> float:
    """Linear position of processed/total inside the [start, end] band."""
    if total <= 0:
        return end
    processed = min(max(processed, 0), total)
    return start + (end - start) * processed / total


class ProgressReporter:
    """
    Fans progress events out to callbacks.
    
    Percentages are clamped to 0..100 and never decrease within one
    reporter. A failing callback is logged and does not abort the run.
    """
    
    def __init__(self, callback: Optional[ProgressCallback] = None):
        self._callbacks: List[ProgressCallback] = []
        self._last_percentage = 0.0
        if callback is not None:
            self.add_callback(callback)
    
    def add_callback(self, callback: ProgressCallback):
        """Add a progress callback function."""
        self._callbacks.append(callback)
    
    def remove_callback(self, callback: ProgressCallback):
        """Remove a progress callback function."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)
    
    @property
    def percentage(self) -> float:
        return self._last_percentage
    
    def report(
        self,
        step: ProgressStep,
        percentage: float,
        message: str,
        current_item: Optional[str] = None,
        total_items: Optional[int] = None,
        processed_items: Optional[int] = None
    ) -> TransferProgress:
        """Emit a progress event and return it."""
        percentage = min(max(float(percentage), self._last_percentage), 100.0)
        self._last_percentage = percentage
        
        event = TransferProgress(
            step=step,
            percentage=percentage,
            message=message,
            current_item=current_item,
            total_items=total_items,
            processed_items=processed_items
        )
        logger.debug(f"[{step.value}] {percentage:.0f}% {message}")
        self._emit_event(event)
        return event
    
    def _emit_event(self, event: TransferProgress):
        """Emit progress event to all callbacks."""
        for callback in self._callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")
