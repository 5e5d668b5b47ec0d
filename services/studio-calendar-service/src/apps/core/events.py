# services/studio-calendar-service/src/apps/core/events.py
"""
Studio Calendar Service Events

Domain event definitions and publishing. Notification and messaging
services consume these events; this service never formats user-facing copy.
"""

import json
import logging
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from django.conf import settings

logger = logging.getLogger(__name__)


class EventType:
    """Event type constants for the studio calendar service."""

    # Reservation lifecycle events
    RESERVATION_CREATED = 'reservation.created'
    RESERVATION_APPROVED = 'reservation.approved'
    RESERVATION_REJECTED = 'reservation.rejected'

    # Calendar events
    CALENDAR_BLOCK_CREATED = 'calendar_block.created'
    CALENDAR_BLOCK_DELETED = 'calendar_block.deleted'

    # Happy hour events
    HAPPY_HOUR_SCHEDULE_REPLACED = 'happy_hour.schedule_replaced'


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for event payloads."""

    def default(self, obj):
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


class EventPublisher:
    """
    Event publisher for the studio calendar service.

    Publishing is best effort: failures are logged and reported through the
    return value, never raised to the caller.
    """

    def __init__(self):
        self.service_name = getattr(settings, 'SERVICE_NAME', 'studio-calendar-service')
        self.published_events: List[Dict[str, Any]] = []

    @property
    def enabled(self) -> bool:
        return getattr(settings, 'EVENT_PUBLISHING_ENABLED', True)

    def publish(
        self,
        event_type: str,
        payload: Dict[str, Any],
        studio_id: UUID = None,
        correlation_id: str = None,
        metadata: Dict[str, Any] = None
    ) -> bool:
        """
        Publish an event to the message bus.

        Args:
            event_type: Type of event (e.g., 'reservation.created')
            payload: Event data
            studio_id: Studio context
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
            'studio_id': str(studio_id) if studio_id else None,
            'correlation_id': correlation_id,
            'payload': payload,
            'metadata': metadata or {},
        }

        try:
            event_json = json.dumps(event, cls=JSONEncoder)

            logger.info(f"Publishing event: {event_type}", extra={
                'event_type': event_type,
                'studio_id': str(studio_id) if studio_id else None,
            })

            self._publish_to_backend(event_type, event_json)
            return True

        except Exception as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            return False

    def _publish_to_backend(self, event_type: str, event_json: str):
        """Publish to the configured message backend."""
        backend = getattr(settings, 'EVENT_BACKEND', 'log')

        if backend == 'redis':
            self._publish_redis(event_type, event_json)
        elif backend == 'webhook':
            self._publish_webhook(event_type, event_json)
        elif backend == 'memory':
            self.published_events.append(json.loads(event_json))
        else:
            logger.debug(f"Event payload: {event_json[:500]}")

    def _publish_redis(self, event_type: str, event_json: str):
        """Publish to Redis pub/sub."""
        import redis

        client = redis.Redis.from_url(getattr(settings, 'REDIS_URL', 'redis://localhost:6379/0'))
        client.publish(f"events:{event_type}", event_json)

    def _publish_webhook(self, event_type: str, event_json: str):
        """Publish via webhook."""
        import requests

        webhook_url = getattr(settings, 'EVENT_WEBHOOK_URL', None)
        if not webhook_url:
            return

        response = requests.post(
            webhook_url,
            data=event_json,
            headers={'Content-Type': 'application/json', 'X-Event-Type': event_type},
            timeout=5
        )
        response.raise_for_status()

    def clear(self):
        """Forget events kept by the memory backend."""
        self.published_events.clear()


# Global event publisher instance
event_publisher = EventPublisher()


def _reservation_payload(request) -> Dict[str, Any]:
    return {
        'reservation_id': request.id,
        'studio_id': request.studio_id,
        'room_id': request.room_id,
        'requester_id': request.requester_id,
        'requester_name': request.requester_name,
        'requester_email': request.requester_email,
        'requester_phone': request.requester_phone,
        'start_at': request.start_at,
        'end_at': request.end_at,
        'hours': request.hours,
        'total_price': request.total_price,
        'currency': request.currency,
        'status': request.status,
        'calendar_block_id': request.calendar_block_id,
    }


# Convenience functions for publishing specific events
def publish_reservation_created(request):
    """Publish reservation created event."""
    event_publisher.publish(
        EventType.RESERVATION_CREATED,
        payload=_reservation_payload(request),
        studio_id=request.studio_id
    )


def publish_reservation_approved(request, approved_by: UUID = None):
    """Publish reservation approved event."""
    payload = _reservation_payload(request)
    payload['approved_by'] = approved_by
    event_publisher.publish(
        EventType.RESERVATION_APPROVED,
        payload=payload,
        studio_id=request.studio_id
    )


def publish_reservation_rejected(request, rejected_by: UUID = None):
    """Publish reservation rejected event."""
    payload = _reservation_payload(request)
    payload['rejected_by'] = rejected_by
    event_publisher.publish(
        EventType.RESERVATION_REJECTED,
        payload=payload,
        studio_id=request.studio_id
    )


def publish_calendar_block_changed(block, action: str):
    """Publish calendar block created/deleted event."""
    event_type = (
        EventType.CALENDAR_BLOCK_CREATED if action == 'created'
        else EventType.CALENDAR_BLOCK_DELETED
    )
    event_publisher.publish(
        event_type,
        payload={
            'block_id': block.id,
            'room_id': block.room_id,
            'type': block.type,
            'status': block.status,
            'start_at': block.start_at,
            'end_at': block.end_at,
            'created_by': block.created_by,
        },
        studio_id=block.studio_id
    )


def publish_happy_hour_schedule_replaced(room, rules):
    """Publish happy hour schedule replaced event."""
    event_publisher.publish(
        EventType.HAPPY_HOUR_SCHEDULE_REPLACED,
        payload={
            'room_id': room.id,
            'rules': [
                {
                    'weekday': rule.weekday,
                    'start_minutes': rule.start_minutes,
                    'end_minutes': rule.end_minutes,
                }
                for rule in rules
            ],
        },
        studio_id=room.studio_id
    )
