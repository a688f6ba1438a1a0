# services/booking-service/src/apps/core/events.py
"""
Booking Service Events

Event definitions and publishing for the scheduling engine. The notifier
is called after a booking decision is stored; publishing failures are
logged and never undo the decision.
"""

import json
import logging
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)


class EventType:
    """Event type constants for booking service."""

    # Booking lifecycle events
    BOOKING_CREATED = 'booking.created'
    BOOKING_CONFIRMED = 'booking.confirmed'
    BOOKING_CANCELLED = 'booking.cancelled'
    BOOKING_COMPLETED = 'booking.completed'
    BOOKING_NO_SHOW = 'booking.no_show'

    # Availability events
    AVAILABILITY_DECLARED = 'availability.declared'


STATUS_EVENTS = {
    'confirmed': EventType.BOOKING_CONFIRMED,
    'cancelled': EventType.BOOKING_CANCELLED,
    'completed': EventType.BOOKING_COMPLETED,
    'no_show': EventType.BOOKING_NO_SHOW,
}


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for event payloads."""

    def default(self, obj):
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


class EventPublisher:
    """
    Event publisher for booking service.

    Backends: 'log' (default) writes the event to the service log,
    'webhook' POSTs it as JSON to EVENT_WEBHOOK_URL.
    """

    def __init__(self):
        self.service_name = 'booking-service'
        self.enabled = getattr(settings, 'EVENT_PUBLISHING_ENABLED', True)

    def publish(
        self,
        event_type: str,
        payload: Dict[str, Any],
        correlation_id: str = None,
        metadata: Dict[str, Any] = None
    ) -> bool:
        """
        Publish an event.

        Args:
            event_type: Type of event (e.g., 'booking.created')
            payload: Event data
            correlation_id: Optional correlation ID for tracing
            metadata: Additional metadata

        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            logger.debug(f"Event publishing disabled, skipping: {event_type}")
            return False

        event = {
            'event_type': event_type,
            'service': self.service_name,
            'timestamp': datetime.now(dt_timezone.utc).isoformat(),
            'correlation_id': correlation_id,
            'payload': payload,
            'metadata': metadata or {},
        }

        try:
            event_json = json.dumps(event, cls=JSONEncoder)

            logger.info(f"Publishing event: {event_type}", extra={'event_type': event_type})

            self._publish_to_backend(event_type, event_json)
            return True

        except Exception as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            return False

    def _publish_to_backend(self, event_type: str, event_json: str):
        """Publish to the configured backend."""
        backend = getattr(settings, 'EVENT_BACKEND', 'log')

        if backend == 'webhook':
            self._publish_webhook(event_type, event_json)
        else:
            logger.debug(f"Event payload: {event_json[:500]}")

    def _publish_webhook(self, event_type: str, event_json: str):
        """POST the event to the configured webhook."""
        webhook_url = getattr(settings, 'EVENT_WEBHOOK_URL', None)
        if not webhook_url:
            logger.warning(f"EVENT_WEBHOOK_URL not set, dropping {event_type}")
            return

        response = httpx.post(
            webhook_url,
            content=event_json,
            headers={'Content-Type': 'application/json', 'X-Event-Type': event_type},
            timeout=getattr(settings, 'EVENT_WEBHOOK_TIMEOUT', 5.0),
        )
        response.raise_for_status()


# Global event publisher instance
event_publisher = EventPublisher()


def booking_payload(booking) -> Dict[str, Any]:
    """Event payload for an engine booking."""
    customer = booking.customer
    return {
        'booking_id': booking.id,
        'booking_number': booking.booking_number,
        'listing_id': booking.listing_id,
        'provider_id': booking.provider_id,
        'customer_id': customer.user_id,
        'guest_email': customer.guest_email or None,
        'status': booking.status,
        'start_time': booking.interval.start,
        'end_time': booking.interval.end,
        'price': booking.price.amount,
        'currency': booking.price.currency,
        'recurrence_group_id': booking.recurrence_group_id,
    }


class BookingNotifier:
    """Turns scheduling decisions into published events."""

    def __init__(self, publisher: EventPublisher = None):
        self.publisher = publisher or event_publisher

    def notify(self, booking, old_status: Optional[str], new_status: str):
        new_status = getattr(new_status, 'value', new_status)
        old_status = getattr(old_status, 'value', old_status)

        if old_status is None:
            event_type = EventType.BOOKING_CREATED
        else:
            event_type = STATUS_EVENTS.get(new_status)
            if event_type is None:
                return

        payload = booking_payload(booking)
        payload['previous_status'] = old_status
        if new_status == 'cancelled':
            payload.update({
                'cancelled_by': booking.cancelled_by,
                'reason': booking.cancellation_reason,
                'is_late_cancellation': booking.is_late_cancellation,
            })

        self.publisher.publish(event_type, payload)

    def availability_declared(self, listing, period):
        self.publisher.publish(
            EventType.AVAILABILITY_DECLARED,
            payload={
                'listing_id': listing.id,
                'period_id': period.id,
                'start_date': period.start_date,
                'end_date': period.end_date,
                'availability_type': period.availability_type,
                'reason': period.reason,
            },
        )
