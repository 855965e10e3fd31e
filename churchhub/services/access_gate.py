import logging
from dataclasses import dataclass
from enum import Enum
from functools import wraps
from typing import Iterable, Optional

from flask import current_app, g, jsonify

from churchhub.models import AppRole, RoleStatus

logger = logging.getLogger(__name__)

SIGN_IN_PATH = "/login"
PENDING_PATH = "/pending-approval"
CHURCH_SELECTION_PATH = "/join"
DASHBOARD_PATH = "/dashboard"

# Page requirements, taken from the dashboard card list.
SERMON_MANAGERS = (AppRole.PASTOR, AppRole.ADMIN)
EVENT_MANAGERS = (AppRole.PASTOR, AppRole.ADMIN)
MISSION_MANAGERS = (AppRole.PASTOR, AppRole.ADMIN)
SONG_MANAGERS = (AppRole.WORSHIP_TEAM, AppRole.PASTOR, AppRole.ADMIN)
UPLOADERS = (AppRole.WORSHIP_TEAM, AppRole.PASTOR, AppRole.ADMIN)
ADMINS = (AppRole.ADMIN,)


class GateOutcome(Enum):
    ALLOW = "allow"
    SIGN_IN = "sign_in"
    PENDING_APPROVAL = "pending_approval"
    DECLINED = "declined"
    NO_CHURCH = "no_church"
    DENIED = "denied"


@dataclass(frozen=True)
class GateDecision:
    outcome: GateOutcome
    redirect_to: Optional[str] = None
    notice: Optional[str] = None

    @property
    def allowed(self):
        return self.outcome == GateOutcome.ALLOW

    @property
    def status_code(self):
        return 401 if self.outcome == GateOutcome.SIGN_IN else 403

    def to_dict(self):
        return {
            "outcome": self.outcome.value,
            "redirect": self.redirect_to,
            "notice": self.notice,
        }


def denial_notice(required_roles: Iterable[AppRole]) -> str:
    labels = [role.label for role in required_roles]
    if len(labels) > 1:
        needed = ", ".join(labels[:-1]) + f" or {labels[-1]}"
    else:
        needed = labels[0]
    return f"Access denied. {needed} privileges required."


def evaluate(session, user_church, required_roles: Optional[Iterable[AppRole]] = None) -> GateDecision:
    """Decides whether a protected page renders, checked in a fixed order."""
    if session is None:
        return GateDecision(GateOutcome.SIGN_IN, SIGN_IN_PATH, "Please sign in to continue.")

    if user_church.status == RoleStatus.PENDING:
        return GateDecision(
            GateOutcome.PENDING_APPROVAL, PENDING_PATH, "Your role request is awaiting review."
        )
    if user_church.status == RoleStatus.REJECTED:
        return GateDecision(GateOutcome.DECLINED, PENDING_PATH, "Your role request was declined.")
    if user_church.status is None:
        return GateDecision(
            GateOutcome.NO_CHURCH, CHURCH_SELECTION_PATH, "Select a church and request a role first."
        )

    if required_roles:
        required_roles = tuple(required_roles)
        if not user_church.holds_any(required_roles):
            return GateDecision(GateOutcome.DENIED, DASHBOARD_PATH, denial_notice(required_roles))

    return GateDecision(GateOutcome.ALLOW)


def resolve_request():
    """Resolves the session and role snapshot for the current request."""
    session = current_app.extensions["session_provider"].get_current_session()
    user_church = current_app.extensions["role_resolver"].resolve(session)
    return session, user_church


def access_gate(*required_roles: AppRole):
    """
    Route decorator. With no roles the page needs any approved role;
    otherwise the approved role must be one of required_roles.
    Sets g.session and g.user_church for the view.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            session, user_church = resolve_request()
            decision = evaluate(session, user_church, required_roles or None)
            if not decision.allowed:
                logger.info(
                    f"Access gate {decision.outcome.value} for "
                    f"user {session.user_id if session else None} on {view.__name__}"
                )
                return jsonify({"error": decision.notice, **decision.to_dict()}), decision.status_code

            g.session = session
            g.user_church = user_church
            return view(*args, **kwargs)

        return wrapper

    return decorator
