from churchhub.models import AppRole, RoleStatus
from churchhub.repositories import ChurchRepository, UserRepository, UserRoleRepository
from churchhub.exceptions import ConflictError, MissingFieldsError, NotFoundError, ValidationError
from churchhub.extensions import db
from churchhub.services.access_gate import evaluate
from churchhub.validators import parse_int
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REGISTRATION_FIELDS = ["email", "password", "full_name", "church_id", "role"]
PROFILE_FIELDS = ["full_name", "avatar_url", "phone"]


def parse_role(value) -> AppRole:
    try:
        return AppRole(str(value).lower())
    except ValueError:
        raise ValidationError(
            "Invalid role. Must be one of: " + ", ".join(role.value for role in AppRole)
        )


class UserService:
    @staticmethod
    def register(session_provider, data):
        """Creates an identity and its pending role request in one transaction."""
        missing = [field for field in REGISTRATION_FIELDS if not data.get(field)]
        if missing:
            raise MissingFieldsError(missing)

        role = parse_role(data["role"])
        church = ChurchRepository.get_church(parse_int(data["church_id"], "church_id"))
        if not church:
            raise ValidationError("Please select a church first")

        try:
            result = session_provider.sign_up(
                data["email"],
                data["password"],
                {"full_name": data["full_name"], "phone": data.get("phone")},
                commit=False,
            )
            UserRoleRepository.create(
                {
                    "user_id": result["user"]["id"],
                    "church_id": church.id,
                    "role": role,
                    "status": RoleStatus.PENDING,
                }
            )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"Registered {data['email']} requesting {role.value} at church {church.id}")
        return {**result, "church": church.to_dict(), "role": role.value, "status": RoleStatus.PENDING.value}

    @staticmethod
    def request_role(user_id, data):
        """
        Files a new role request. Only allowed when the identity has no open
        request, which is how a declined member tries again.
        """
        missing = [field for field in ("church_id", "role") if not data.get(field)]
        if missing:
            raise MissingFieldsError(missing)

        role = parse_role(data["role"])
        church = ChurchRepository.get_church(parse_int(data["church_id"], "church_id"))
        if not church:
            raise ValidationError("Please select a church first")

        existing = UserRoleRepository.find_open_for_user(user_id)
        if existing:
            logger.warning(f"User {user_id} requested a role while request {existing.id} is {existing.status.value}")
            raise ConflictError(f"You already have a {existing.status.value} role request")

        try:
            assignment = UserRoleRepository.create(
                {"user_id": user_id, "church_id": church.id, "role": role, "status": RoleStatus.PENDING}
            )
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        logger.info(f"User {user_id} requested {role.value} at church {church.id}")
        return assignment

    @staticmethod
    def role_status(session, user_church):
        decision = evaluate(session, user_church)
        return {
            "email": session.email if session else None,
            "user_church": user_church.to_dict(),
            "gate": decision.to_dict(),
        }

    @staticmethod
    def get_profile(user_id):
        profile = UserRepository.find_profile(user_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    @staticmethod
    def update_profile(user_id, data):
        profile = UserService.get_profile(user_id)
        for field in PROFILE_FIELDS:
            if field in data:
                value = data[field]
                setattr(profile, field, value.strip() if isinstance(value, str) and value.strip() else None)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return profile
