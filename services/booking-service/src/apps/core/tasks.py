# services/booking-service/src/apps/core/tasks.py
"""
Celery Tasks for Booking Service

Periodic sweep moving confirmed bookings that have ended to completed.
"""

import logging
from typing import Any, Dict

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(name='apps.core.tasks.complete_finished_bookings')
def complete_finished_bookings() -> Dict[str, Any]:
    """
    Complete every confirmed booking whose end time has passed.

    Returns:
        Dict with the number of bookings completed
    """
    from .services import build_scheduling_service

    completed = build_scheduling_service().complete_finished_bookings()

    if completed:
        logger.info(f"Completed {completed} finished bookings")
    return {'success': True, 'completed': completed}
