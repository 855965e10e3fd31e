from enum import Enum


class AppRole(Enum):
    MEMBER = "member"
    PASTOR = "pastor"
    WORSHIP_TEAM = "worship_team"
    ADMIN = "admin"

    @property
    def label(self):
        return self.value.replace("_", " ").title()


class RoleStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RecordType(Enum):
    INCOME = "income"
    EXPENSE = "expense"


class EventType(Enum):
    SERVICE = "service"
    STUDY = "study"
    YOUTH = "youth"
    SPECIAL = "special"
    OUTREACH = "outreach"
    PRAYER = "prayer"


class MissionStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    UPCOMING = "upcoming"


class AuthEvent(Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


def values_of(enum_cls):
    return [member.value for member in enum_cls]
