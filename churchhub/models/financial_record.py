from churchhub.extensions import db
from .mixins import TenantScopedMixin

CATEGORIES = [
    "Tithes & Offerings",
    "Missions",
    "Building Fund",
    "Utilities",
    "Staff Salaries",
    "Ministry Programs",
    "Outreach",
    "Maintenance",
    "Supplies",
    "Other",
]


class FinancialRecord(TenantScopedMixin, db.Model):
    __tablename__ = "financial_records"

    id = db.Column(db.Integer, primary_key=True)
    category = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    amount = db.Column(db.DECIMAL(12, 2), nullable=False)
    record_date = db.Column(db.Date, nullable=False, server_default=db.func.current_date())
    record_type = db.Column(db.String(20), nullable=False)
    is_public = db.Column(db.Boolean, nullable=True, default=True)

    def to_dict(self):
        return {
            "id": self.id,
            "category": self.category,
            "description": self.description,
            "amount": str(self.amount) if self.amount is not None else None,
            "record_date": self.record_date.isoformat() if self.record_date else None,
            "record_type": self.record_type,
            "is_public": self.is_public,
            **self.audit_dict(),
        }
