from sqlalchemy.orm import declared_attr
from churchhub.extensions import db


class TenantScopedMixin:
    """Columns shared by every record that belongs to a church."""

    @declared_attr
    def church_id(cls):
        return db.Column(db.Integer, db.ForeignKey("churches.id"), nullable=True, index=True)

    @declared_attr
    def created_by(cls):
        return db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    @declared_attr
    def created_at(cls):
        return db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    @declared_attr
    def updated_at(cls):
        return db.Column(
            db.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=db.func.now(),
            onupdate=db.func.now(),
        )

    def audit_dict(self):
        return {
            "church_id": self.church_id,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
