import logging
from datetime import datetime
from typing import Optional

import pytz

from churchhub.exceptions import InvalidTransitionError, NotFoundError, UnauthorizedError, ValidationError
from churchhub.extensions import db
from churchhub.models import RoleStatus
from churchhub.notifications import ChangeEvent
from churchhub.repositories import UserRepository, UserRoleRepository
from churchhub.utils.email import send_role_decision_email

logger = logging.getLogger(__name__)

DECISIONS = {
    "approve": RoleStatus.APPROVED,
    "reject": RoleStatus.REJECTED,
}


class ApprovalWorkflow:
    """
    pending -> approved | rejected. Both outcomes are terminal; a declined
    identity files a new request instead of reopening the old one.
    """

    def __init__(self, channel):
        self.channel = channel

    def decide(self, assignment_id: int, decision: str, reviewer, reviewer_id: int):
        """
        Applies an admin's decision to a role request.

        Returns (assignment, changed). Re-applying the status a request
        already has changes nothing and announces nothing.
        """
        if not reviewer.is_admin:
            logger.warning(f"User {reviewer_id} attempted a role decision without admin rights")
            raise UnauthorizedError("Admin privileges required")

        target = DECISIONS.get(decision)
        if target is None:
            raise ValidationError("Decision must be 'approve' or 'reject'")

        assignment = UserRoleRepository.find_by_id(assignment_id)
        if not assignment:
            raise NotFoundError("Role request not found")

        if assignment.status == target:
            logger.info(f"Role request {assignment_id} already {target.value}; nothing to do")
            return assignment, False

        if assignment.status != RoleStatus.PENDING:
            raise InvalidTransitionError(assignment.status.value, target.value)

        old = assignment.to_dict()
        assignment.status = target
        assignment.reviewed_by = reviewer_id
        assignment.reviewed_at = datetime.now(pytz.UTC)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(
            f"User {reviewer_id} {target.value} role request {assignment.id} "
            f"({assignment.role.value} for user {assignment.user_id})"
        )
        self.channel.announce(
            ChangeEvent(table="user_roles", event_type="UPDATE", new=assignment.to_dict(), old=old)
        )

        user = UserRepository.find_by_id(assignment.user_id)
        if user:
            send_role_decision_email(user, assignment)
        return assignment, True

    @staticmethod
    def list_assignments(reviewer, church_id: Optional[int] = None):
        """All role requests, newest first, with profile details and a pending count."""
        if not reviewer.is_admin:
            raise UnauthorizedError("Admin privileges required")

        assignments = UserRoleRepository.list_all(church_id)
        profiles = UserRepository.find_profiles([a.user_id for a in assignments])

        users = []
        for assignment in assignments:
            data = assignment.to_dict()
            profile = profiles.get(assignment.user_id)
            data["profile"] = profile.to_dict() if profile else None
            user = UserRepository.find_by_id(assignment.user_id)
            data["email"] = user.email if user else None
            users.append(data)

        pending_count = sum(1 for a in assignments if a.status == RoleStatus.PENDING)
        return {"users": users, "pending_count": pending_count}
