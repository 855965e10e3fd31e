from churchhub.models import Sermon
from churchhub.repositories import TenantRepository
from churchhub.validators import parse_sermon

sermons = TenantRepository(Sermon)


class SermonService:
    @staticmethod
    def get_sermons(scope, search=None):
        """Members only: an empty list unless the viewer's church resolves."""
        results = sermons.list(scope, order_by=[Sermon.sermon_date.desc(), Sermon.id.desc()])
        if search:
            results = [sermon for sermon in results if sermon.matches(search)]
        return results

    @staticmethod
    def get_latest_sermon(scope):
        results = sermons.list(scope, order_by=[Sermon.sermon_date.desc(), Sermon.id.desc()], limit=1)
        return results[0] if results else None

    @staticmethod
    def get_managed_sermons(scope, selected_church_id=None):
        return sermons.list(
            scope,
            order_by=[Sermon.sermon_date.desc(), Sermon.id.desc()],
            selected_church_id=selected_church_id,
        )

    @staticmethod
    def create_sermon(scope, data, selected_church_id=None):
        return sermons.create(scope, parse_sermon(data), selected_church_id)

    @staticmethod
    def update_sermon(scope, sermon_id, data):
        return sermons.update(scope, sermon_id, parse_sermon(data, partial=True))

    @staticmethod
    def delete_sermon(scope, sermon_id):
        return sermons.delete(scope, sermon_id)
