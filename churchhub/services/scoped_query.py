import logging
from typing import Optional

from churchhub.exceptions import MissingFieldsError, UnauthorizedError, ValidationError
from churchhub.extensions import db
from churchhub.models import Church

logger = logging.getLogger(__name__)


class ScopedQueryBuilder:
    """
    Appends the tenant filter to reads and stamps the tenant on writes.

    A viewer without a resolved church never gets an unfiltered query back:
    `scope` returns None and the caller must render an empty result instead
    of executing anything.
    """

    def __init__(self, viewer, user_id: Optional[int] = None):
        self.viewer = viewer
        self.user_id = user_id

    @property
    def own_church_id(self) -> Optional[int]:
        if not self.viewer.is_approved:
            return None
        return self.viewer.church_id

    def church_filter(self, selected_church_id=None, allow_public_selection=False):
        """
        Returns (should_execute, church_id). church_id None with
        should_execute True means "all tenants" and only happens for admins.
        """
        if self.viewer.is_admin:
            return True, selected_church_id

        church_id = self.own_church_id
        if church_id is None and allow_public_selection:
            church_id = selected_church_id
        if church_id is None:
            return False, None
        return True, church_id

    def scope(self, query, model, selected_church_id=None, allow_public_selection=False):
        should_execute, church_id = self.church_filter(selected_church_id, allow_public_selection)
        if not should_execute:
            logger.info(f"Skipping {model.__tablename__} query: no church in scope for viewer")
            return None
        if church_id is None:
            return query
        return query.filter(model.church_id == church_id)

    def stamp(self, attrs: dict, selected_church_id=None) -> dict:
        """Returns attrs tagged with the acting identity and its church."""
        if self.user_id is None or not self.viewer.is_approved:
            raise UnauthorizedError("An approved role is required to write records")

        if self.viewer.is_admin:
            if selected_church_id is None:
                raise MissingFieldsError(["church_id"])
            church_id = int(selected_church_id)
            if db.session.get(Church, church_id) is None:
                raise ValidationError(f"Church {church_id} does not exist")
        else:
            church_id = self.viewer.church_id
            if church_id is None:
                raise UnauthorizedError("Your role is not attached to a church")
            if selected_church_id is not None and int(selected_church_id) != church_id:
                logger.warning(
                    f"User {self.user_id} tried to write to church {selected_church_id} from church {church_id}"
                )
                raise UnauthorizedError("You can only manage records for your own church")

        return {**attrs, "church_id": int(church_id), "created_by": self.user_id}

    def ensure_row_in_scope(self, row):
        if self.viewer.is_admin:
            return
        if self.own_church_id is None or row.church_id != self.own_church_id:
            raise UnauthorizedError("You can only manage records for your own church")
