"""
Cache invalidation signals
Automatically invalidate cached summaries when data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_dashboard_cache

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

# Models whose changes alter dashboard numbers
DASHBOARD_MODELS = {
    'Manufacturer',
    'StoneSettingRate',
    'GemstonePrice',
    'RapaportPrice',
    'ExchangeRate',
    'Batch',
    'AnalysisRecord',
    'AnalysisStone',
}


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    previous = is_suspended()
    _thread_locals.suspended = True
    try:
        yield
    finally:
        _thread_locals.suspended = previous


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete])
def invalidate_dashboard_on_change(sender, instance, **kwargs):
    """Invalidate dashboard cache when priced or analysed data changes"""
    if is_suspended():
        return

    if sender.__name__ in DASHBOARD_MODELS:
        try:
            invalidate_dashboard_cache()
        except Exception as e:
            logger.warning(f"Error in invalidate_dashboard_on_change signal: {e}")
