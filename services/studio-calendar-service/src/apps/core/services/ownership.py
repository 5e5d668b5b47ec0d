# services/studio-calendar-service/src/apps/core/services/ownership.py
"""
Lookups shared by the services, with owner checks.
"""

import uuid

from apps.core.models import Studio, Room

from .exceptions import AuthorizationError, NotFoundError


def is_authenticated(actor) -> bool:
    return actor is not None and bool(getattr(actor, 'is_authenticated', False))


def actor_uuid(actor):
    """UUID of an authenticated actor, None when the subject is not a UUID."""
    if not is_authenticated(actor):
        return None
    try:
        return uuid.UUID(str(actor.id))
    except (TypeError, ValueError, AttributeError):
        return None


def get_studio(studio_id) -> Studio:
    studio = Studio.objects.filter(id=studio_id, is_active=True).first()
    if studio is None:
        raise NotFoundError(f"Studio {studio_id} not found")
    return studio


def get_room(room_id, studio: Studio = None) -> Room:
    queryset = Room.objects.select_related('studio').filter(id=room_id, is_active=True)
    if studio is not None:
        queryset = queryset.filter(studio=studio)

    room = queryset.first()
    if room is None:
        raise NotFoundError(f"Room {room_id} not found")
    return room


def require_owner(studio: Studio, actor):
    """Raise unless the actor owns the studio."""
    if not is_authenticated(actor):
        raise AuthorizationError("Authentication required", requires_login=True)
    if not studio.is_owned_by(actor):
        raise AuthorizationError("Only the studio owner can do this")


def get_owned_studio(studio_id, actor) -> Studio:
    studio = get_studio(studio_id)
    require_owner(studio, actor)
    return studio
