from decimal import Decimal

from churchhub.extensions import db
from .enums import MissionStatus
from .mixins import TenantScopedMixin


class Mission(TenantScopedMixin, db.Model):
    __tablename__ = "missions"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(255), nullable=True)
    goal_amount = db.Column(db.DECIMAL(12, 2), nullable=True)
    raised_amount = db.Column(db.DECIMAL(12, 2), nullable=True, default=0)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(20), nullable=True, default=MissionStatus.ACTIVE.value)
    image_url = db.Column(db.String(1024), nullable=True)

    @property
    def progress_percent(self):
        # Raised may exceed goal; the value is reported as-is and flagged.
        if not self.goal_amount:
            return None
        raised = Decimal(self.raised_amount or 0)
        return float(round(raised / Decimal(self.goal_amount) * 100, 1))

    @property
    def is_overfunded(self):
        return bool(self.goal_amount) and Decimal(self.raised_amount or 0) > Decimal(self.goal_amount)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "goal_amount": str(self.goal_amount) if self.goal_amount is not None else None,
            "raised_amount": str(self.raised_amount) if self.raised_amount is not None else None,
            "progress_percent": self.progress_percent,
            "is_overfunded": self.is_overfunded,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "status": self.status,
            "image_url": self.image_url,
            **self.audit_dict(),
        }
