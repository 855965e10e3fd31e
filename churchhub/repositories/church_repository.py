from churchhub.extensions import db
from churchhub.models import Church


class ChurchRepository:
    @staticmethod
    def get_churches():
        return Church.query.order_by(Church.name.asc()).all()

    @staticmethod
    def get_church(church_id: int) -> Church:
        return db.session.get(Church, church_id)

    @staticmethod
    def find_by_slug(slug: str) -> Church:
        return Church.query.filter_by(slug=slug).first()

    @staticmethod
    def create_church(attrs):
        church = Church(**attrs)
        db.session.add(church)
        db.session.commit()
        return church

    @staticmethod
    def update_church(church: Church, attrs: dict):
        for key, value in attrs.items():
            if hasattr(church, key):
                setattr(church, key, value)
        db.session.commit()
        return church
