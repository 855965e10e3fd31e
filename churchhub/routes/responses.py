from flask import current_app, jsonify
from sqlalchemy.exc import IntegrityError

from churchhub.exceptions import (
    ConflictError,
    InvalidTransitionError,
    MissingFieldsError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from churchhub.extensions import db


def error_response(e, action):
    """Maps a service exception to the JSON error body and status code."""
    if isinstance(e, MissingFieldsError):
        return jsonify({"error": str(e), "missing_fields": e.fields}), 400
    if isinstance(e, ValidationError):
        return jsonify({"error": str(e)}), 400
    if isinstance(e, UnauthorizedError):
        return jsonify({"error": str(e)}), 403
    if isinstance(e, NotFoundError):
        return jsonify({"error": str(e)}), 404
    if isinstance(e, (ConflictError, InvalidTransitionError)):
        return jsonify({"error": str(e)}), 409
    if isinstance(e, IntegrityError):
        db.session.rollback()
        current_app.logger.error(f"Failed to {action}: {str(e.orig)}")
        return jsonify({"error": f"Failed to {action}: {str(e.orig)}"}), 409

    db.session.rollback()
    current_app.logger.error(f"Failed to {action}: {str(e)}")
    if isinstance(e, StorageError):
        return jsonify({"error": str(e)}), 500
    return jsonify({"error": "An unexpected error occurred"}), 500
