from typing import List, Optional

from churchhub.extensions import db
from churchhub.models import UserRoleAssignment, RoleStatus


class UserRoleRepository:
    @staticmethod
    def find_by_id(assignment_id: int) -> Optional[UserRoleAssignment]:
        return db.session.get(UserRoleAssignment, assignment_id)

    @staticmethod
    def find_current_for_user(user_id: int) -> Optional[UserRoleAssignment]:
        """The identity's most recent assignment, open or not."""
        return (
            UserRoleAssignment.query.filter_by(user_id=user_id)
            .order_by(UserRoleAssignment.created_at.desc(), UserRoleAssignment.id.desc())
            .execution_options(populate_existing=True)
            .first()
        )

    @staticmethod
    def find_open_for_user(user_id: int) -> Optional[UserRoleAssignment]:
        return UserRoleAssignment.query.filter(
            UserRoleAssignment.user_id == user_id,
            UserRoleAssignment.status != RoleStatus.REJECTED,
        ).one_or_none()

    @staticmethod
    def list_all(church_id: Optional[int] = None) -> List[UserRoleAssignment]:
        query = UserRoleAssignment.query
        if church_id is not None:
            query = query.filter(UserRoleAssignment.church_id == church_id)
        return query.order_by(
            UserRoleAssignment.created_at.desc(), UserRoleAssignment.id.desc()
        ).all()

    @staticmethod
    def create(attrs) -> UserRoleAssignment:
        assignment = UserRoleAssignment(**attrs)
        db.session.add(assignment)
        return assignment
