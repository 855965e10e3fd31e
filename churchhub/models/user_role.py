from churchhub.extensions import db
from .enums import AppRole, RoleStatus, values_of


class UserRoleAssignment(db.Model):
    """A request by one identity for one role at one church.

    Rows are never deleted. A rejected row stays as history and the identity
    files a new row to try again, so the partial index below only allows a
    single open (pending or approved) row per identity.
    """

    __tablename__ = "user_roles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    church_id = db.Column(db.Integer, db.ForeignKey("churches.id"), nullable=True)
    role = db.Column(
        db.Enum(AppRole, name="app_role", values_callable=values_of),
        nullable=False,
        default=AppRole.MEMBER,
    )
    status = db.Column(
        db.Enum(RoleStatus, name="role_status", values_callable=values_of),
        nullable=False,
        default=RoleStatus.PENDING,
    )
    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    reviewed_at = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    created_at = db.Column(db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now())

    church = db.relationship("Church")

    __table_args__ = (
        db.Index(
            "uq_user_roles_open_assignment",
            "user_id",
            unique=True,
            sqlite_where=db.text("status != 'rejected'"),
            postgresql_where=db.text("status != 'rejected'"),
        ),
    )

    @property
    def is_open(self):
        return self.status != RoleStatus.REJECTED

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "church_id": self.church_id,
            "church": self.church.to_dict() if self.church else None,
            "role": self.role.value if self.role else None,
            "status": self.status.value if self.status else None,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return (
            f"UserRoleAssignment("
            f"id={self.id}, "
            f"user_id={self.user_id}, "
            f"church_id={self.church_id}, "
            f"role={self.role}, "
            f"status={self.status}"
            f")"
        )
