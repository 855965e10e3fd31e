from churchhub.models.church import Church
from churchhub.models.user import User, TokenBlocklist
from churchhub.models.profile import Profile
from churchhub.models.user_role import UserRoleAssignment
from churchhub.models.event import Event
from churchhub.models.sermon import Sermon
from churchhub.models.song import Song, SongList, SongListItem
from churchhub.models.mission import Mission
from churchhub.models.financial_record import FinancialRecord
from churchhub.models.enums import AppRole, RoleStatus, RecordType, EventType, MissionStatus, AuthEvent
