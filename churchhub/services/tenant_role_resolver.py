"""
Resolves an authenticated identity to its church, role and approval status.

`TenantRoleResolver.resolve` is a one-shot lookup. `RoleWatcher` keeps a
snapshot current for as long as a consumer (for example the pending-approval
stream) is alive: it listens to session changes and to updates of the
identity's role assignment, and re-resolves on every notification.
"""
import logging
import queue
from dataclasses import dataclass, asdict
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from churchhub.exceptions import SubscriptionClosedError
from churchhub.models import AppRole, RoleStatus, AuthEvent
from churchhub.repositories.user_role_repository import UserRoleRepository

logger = logging.getLogger(__name__)

ROLE_TABLE = "user_roles"


@dataclass(frozen=True)
class UserChurch:
    church_id: Optional[int] = None
    church_name: Optional[str] = None
    role: Optional[AppRole] = None
    status: Optional[RoleStatus] = None
    is_loading: bool = False
    is_approved: bool = False
    is_pastor: bool = False
    is_admin: bool = False
    is_worship_team: bool = False

    @classmethod
    def empty(cls):
        return cls()

    @classmethod
    def from_assignment(cls, assignment):
        is_approved = assignment.status == RoleStatus.APPROVED
        role = assignment.role
        return cls(
            church_id=assignment.church_id,
            church_name=assignment.church.name if assignment.church else None,
            role=role,
            status=assignment.status,
            is_loading=False,
            is_approved=is_approved,
            is_pastor=is_approved and role == AppRole.PASTOR,
            is_admin=is_approved and role == AppRole.ADMIN,
            is_worship_team=is_approved and role == AppRole.WORSHIP_TEAM,
        )

    def holds_any(self, roles) -> bool:
        return self.is_approved and self.role in set(roles)

    def to_dict(self):
        data = asdict(self)
        data["role"] = self.role.value if self.role else None
        data["status"] = self.status.value if self.status else None
        return data


class TenantRoleResolver:
    def resolve(self, session) -> UserChurch:
        if session is None:
            return UserChurch.empty()

        try:
            assignment = UserRoleRepository.find_current_for_user(session.user_id)
        except SQLAlchemyError as e:
            logger.error(f"Role lookup failed for user {session.user_id}: {str(e)}")
            return UserChurch.empty()

        if assignment is None:
            logger.info(f"User {session.user_id} has no role assignment")
            return UserChurch.empty()

        return UserChurch.from_assignment(assignment)

    def watch(self, session, session_provider, channel) -> "RoleWatcher":
        return RoleWatcher(self, session, session_provider, channel)


class RoleWatcher:
    """
    Keeps a UserChurch snapshot current for one identity.

    Acquire with start() or a with-block; release with close(). Between the
    two, every session change or role-row update for the identity lands in
    the watcher's queue and next_change() turns it into a fresh snapshot.
    """

    def __init__(self, resolver: TenantRoleResolver, session, session_provider, channel):
        self.resolver = resolver
        self.session = session
        self.user_id = session.user_id if session else None
        self._session_provider = session_provider
        self._channel = channel
        self._subscription = None
        self._unsubscribe = None
        self.current = UserChurch(is_loading=True)

    def start(self):
        if self._subscription is not None:
            return self
        self._subscription = self._channel.listen_to_row_updates(ROLE_TABLE, self.user_id)
        self._unsubscribe = self._session_provider.subscribe(self._on_session_change)
        self.current = self.resolver.resolve(self.session)
        return self

    def _on_session_change(self, change):
        if change.user_id != self.user_id or self._subscription is None:
            return
        if change.event == AuthEvent.SIGNED_OUT and not self._same_token(change.token_id):
            return
        try:
            self._subscription.push(change)
        except queue.Full:
            logger.warning(f"Role watcher queue full for user {self.user_id}; dropping session change")

    def _same_token(self, token_id) -> bool:
        # A sign-out from another device leaves this one signed in
        own = self.session.token_id if self.session else None
        return own is None or token_id is None or own == token_id

    def next_change(self, timeout: Optional[float] = None) -> Optional[UserChurch]:
        """
        Blocks until a notification arrives, then re-resolves the snapshot.
        Returns None on timeout and raises SubscriptionClosedError once the
        channel has dropped the subscription (shutdown or a full queue).
        """
        if self._subscription is None:
            raise RuntimeError("RoleWatcher.start() must be called first")

        item = self._subscription.get(timeout=timeout)
        if item is None:
            if self._subscription.closed:
                raise SubscriptionClosedError(f"Change subscription for user {self.user_id} was closed")
            return None

        event = getattr(item, "event", None)
        if event == AuthEvent.SIGNED_OUT:
            self.session = None
        elif event in (AuthEvent.SIGNED_IN, AuthEvent.TOKEN_REFRESHED):
            self.session = item.session

        self.current = self.resolver.resolve(self.session)
        return self.current

    def close(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
