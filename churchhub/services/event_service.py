from datetime import datetime, timezone

from churchhub.models import Event
from churchhub.repositories import TenantRepository
from churchhub.validators import parse_event

events = TenantRepository(Event)

HOME_PREVIEW_LIMIT = 3


class EventService:
    @staticmethod
    def get_upcoming_events(scope, selected_church_id=None, limit=None):
        """Public listing: events from now on, soonest first."""
        return events.list(
            scope,
            order_by=Event.event_date.asc(),
            filters=[Event.event_date >= datetime.now(timezone.utc)],
            limit=limit,
            selected_church_id=selected_church_id,
            allow_public_selection=True,
        )

    @staticmethod
    def get_managed_events(scope, selected_church_id=None):
        return events.list(scope, order_by=Event.event_date.desc(), selected_church_id=selected_church_id)

    @staticmethod
    def create_event(scope, data, selected_church_id=None):
        return events.create(scope, parse_event(data), selected_church_id)

    @staticmethod
    def update_event(scope, event_id, data):
        return events.update(scope, event_id, parse_event(data, partial=True))

    @staticmethod
    def delete_event(scope, event_id):
        return events.delete(scope, event_id)
