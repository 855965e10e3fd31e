from churchhub.extensions import db
from .enums import EventType
from .mixins import TenantScopedMixin


class Event(TenantScopedMixin, db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    event_date = db.Column(db.TIMESTAMP(timezone=True), nullable=False)
    location = db.Column(db.String(255), nullable=True)
    event_type = db.Column(db.String(20), nullable=True, default=EventType.SERVICE.value)
    image_url = db.Column(db.String(1024), nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "event_date": self.event_date.isoformat() if self.event_date else None,
            "location": self.location,
            "event_type": self.event_type,
            "image_url": self.image_url,
            **self.audit_dict(),
        }
