from churchhub.models import Mission
from churchhub.repositories import TenantRepository
from churchhub.validators import parse_mission

missions = TenantRepository(Mission)


class MissionService:
    @staticmethod
    def get_missions(scope, selected_church_id=None):
        return missions.list(
            scope,
            order_by=[Mission.created_at.desc(), Mission.id.desc()],
            selected_church_id=selected_church_id,
            allow_public_selection=True,
        )

    @staticmethod
    def get_managed_missions(scope, selected_church_id=None):
        return missions.list(
            scope,
            order_by=[Mission.created_at.desc(), Mission.id.desc()],
            selected_church_id=selected_church_id,
        )

    @staticmethod
    def create_mission(scope, data, selected_church_id=None):
        return missions.create(scope, parse_mission(data), selected_church_id)

    @staticmethod
    def update_mission(scope, mission_id, data):
        return missions.update(scope, mission_id, parse_mission(data, partial=True))

    @staticmethod
    def delete_mission(scope, mission_id):
        return missions.delete(scope, mission_id)
