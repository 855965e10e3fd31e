import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from churchhub.exceptions import ConflictError, NotFoundError, UnauthorizedError
from churchhub.extensions import db
from churchhub.repositories import ChurchRepository
from churchhub.validators import parse_church

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "church"


class ChurchService:
    @staticmethod
    def get_churches():
        try:
            return ChurchRepository.get_churches()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to load churches: {str(e)}")
            return []

    @staticmethod
    def resolve_selection(value) -> Optional[int]:
        """Maps a church id or slug picked by a visitor to a church id."""
        if value is None or str(value).strip() == "":
            return None
        value = str(value).strip()
        # str.isdigit() also accepts digits int() cannot parse, like "²"
        if value.isascii() and value.isdigit():
            church = ChurchRepository.get_church(int(value))
        else:
            church = ChurchRepository.find_by_slug(value)
        return church.id if church else None

    @staticmethod
    def create_church(viewer, data):
        if not viewer.is_admin:
            raise UnauthorizedError("Admin privileges required")
        attrs = parse_church(data)
        attrs.setdefault("slug", slugify(attrs["name"]))
        if ChurchRepository.find_by_slug(attrs["slug"]):
            raise ConflictError(f"A church with slug '{attrs['slug']}' already exists")
        try:
            church = ChurchRepository.create_church(attrs)
        except IntegrityError:
            db.session.rollback()
            raise ConflictError(f"A church with slug '{attrs['slug']}' already exists")
        logger.info(f"Church created: {church.slug}")
        return church

    @staticmethod
    def update_church(viewer, church_id, data):
        if not viewer.is_admin:
            raise UnauthorizedError("Admin privileges required")
        church = ChurchRepository.get_church(church_id)
        if not church:
            raise NotFoundError("Church not found")
        attrs = parse_church(data, partial=True)
        if "slug" in attrs:
            existing = ChurchRepository.find_by_slug(attrs["slug"])
            if existing and existing.id != church.id:
                raise ConflictError(f"A church with slug '{attrs['slug']}' already exists")
        try:
            return ChurchRepository.update_church(church, attrs)
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("Church could not be updated")
