from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from churchhub.extensions import db
from churchhub.exceptions import NotFoundError
from churchhub.services.scoped_query import ScopedQueryBuilder


class TenantRepository:
    """
    Data access for one church-scoped model. Every read and write goes
    through a ScopedQueryBuilder, so callers cannot forget the tenant filter.
    """

    def __init__(self, model):
        self.model = model

    def list(
        self,
        scope: ScopedQueryBuilder,
        order_by=None,
        filters=(),
        limit: Optional[int] = None,
        selected_church_id: Optional[int] = None,
        allow_public_selection: bool = False,
    ) -> List:
        query = scope.scope(
            self.model.query,
            self.model,
            selected_church_id=selected_church_id,
            allow_public_selection=allow_public_selection,
        )
        if query is None:
            return []

        for condition in filters:
            query = query.filter(condition)
        if order_by is not None:
            query = query.order_by(*order_by) if isinstance(order_by, (list, tuple)) else query.order_by(order_by)
        if limit is not None:
            query = query.limit(limit)

        try:
            return query.all()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to load {self.model.__tablename__}: {str(e)}")
            return []

    def get(self, scope: ScopedQueryBuilder, record_id: int):
        """Fetch one record inside the viewer's scope; out-of-scope looks missing."""
        query = scope.scope(self.model.query, self.model)
        record = query.filter(self.model.id == record_id).first() if query is not None else None
        if not record:
            raise NotFoundError(f"{self.model.__name__} not found")
        return record

    def create(self, scope: ScopedQueryBuilder, attrs: dict, selected_church_id: Optional[int] = None):
        record = self.model(**scope.stamp(attrs, selected_church_id))
        db.session.add(record)
        self._commit()
        return record

    def update(self, scope: ScopedQueryBuilder, record_id: int, attrs: dict):
        record = self.get(scope, record_id)
        scope.ensure_row_in_scope(record)
        for key, value in attrs.items():
            if key in ("id", "church_id", "created_by", "created_at"):
                continue
            if hasattr(record, key):
                setattr(record, key, value)
        self._commit()
        return record

    def delete(self, scope: ScopedQueryBuilder, record_id: int):
        record = self.get(scope, record_id)
        scope.ensure_row_in_scope(record)
        db.session.delete(record)
        self._commit()
        return record

    @staticmethod
    def _commit():
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
