from flask import Blueprint, Response, current_app, jsonify, make_response, request, stream_with_context
from flask_jwt_extended import get_jwt, get_jwt_identity, jwt_required

from churchhub.exceptions import (
    ConflictError,
    MissingFieldsError,
    NotFoundError,
    SubscriptionClosedError,
    ValidationError,
)
from churchhub.extensions import db, limiter
from churchhub.notifications import format_sse
from churchhub.routes.responses import error_response
from churchhub.services.access_gate import evaluate, resolve_request
from churchhub.services.tenant_role_resolver import UserChurch
from churchhub.services.user_service import UserService

user_bp = Blueprint("user", __name__)

AUTH_LIMIT = "10 per minute"
KEEPALIVE_SECONDS = 15


def _session_provider():
    return current_app.extensions["session_provider"]


def _sign_in_required():
    decision = evaluate(None, UserChurch.empty())
    return jsonify({"error": decision.notice, **decision.to_dict()}), decision.status_code


@user_bp.route("/signup", methods=["POST"])
@limiter.limit(AUTH_LIMIT)
def sign_up():
    try:
        user_data = request.get_json(silent=True)
        if not user_data:
            return jsonify({"error": "No data provided"}), 400

        result = UserService.register(_session_provider(), user_data)
        return make_response(jsonify(result), 201)
    except MissingFieldsError as e:
        return jsonify({"error": "Missing required fields", "missing_fields": e.fields}), 400
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Signup error: {str(e)}")
        return jsonify({"error": "An unexpected error occurred"}), 500


@user_bp.route("/signin", methods=["POST"])
@limiter.limit(AUTH_LIMIT)
def sign_in():
    try:
        user_data = request.get_json(silent=True)
        if not user_data:
            return jsonify({"error": "No data provided"}), 400

        required_fields = ["email", "password"]
        missing_fields = [field for field in required_fields if field not in user_data]
        if missing_fields:
            return (
                jsonify(
                    {
                        "error": "Missing required fields",
                        "missing_fields": missing_fields,
                    }
                ),
                400,
            )

        result = _session_provider().sign_in(user_data["email"], user_data["password"])
        return make_response(jsonify(result), 200)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 401
    except Exception as e:
        current_app.logger.error(f"Login error: {str(e)}")
        return jsonify({"error": "An unexpected error occurred"}), 500


@user_bp.route("/signout", methods=["POST"])
@jwt_required()
def sign_out():
    try:
        result = _session_provider().sign_out(int(get_jwt_identity()), get_jwt()["jti"])
        return jsonify(result), 200
    except Exception as e:
        return error_response(e, "sign out")


@user_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh():
    try:
        result = _session_provider().refresh(int(get_jwt_identity()))
        return jsonify(result), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 401
    except Exception as e:
        return error_response(e, "refresh session")


@user_bp.route("/session", methods=["GET"])
def get_session():
    """The signed-in identity, if any, and its church role snapshot."""
    try:
        session, user_church = resolve_request()
        return jsonify(
            {
                "session": {"user_id": session.user_id, "email": session.email} if session else None,
                "user_church": user_church.to_dict(),
            }
        )
    except Exception as e:
        return error_response(e, "load session")


@user_bp.route("/verify-email/<token>", methods=["POST"])
def verify_email(token):
    try:
        return jsonify(_session_provider().verify_email(token)), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        return error_response(e, "verify email")


@user_bp.route("/resend-verification", methods=["POST"])
@limiter.limit(AUTH_LIMIT)
def resend_verification():
    try:
        data = request.get_json(silent=True)
        if not data or not data.get("email"):
            return jsonify({"error": "Email is required"}), 400
        return jsonify(_session_provider().resend_verification(data["email"])), 200
    except Exception as e:
        return error_response(e, "resend verification")


@user_bp.route("/role-request", methods=["POST"])
@jwt_required()
def request_role():
    """A declined (or never-assigned) identity asks for a role again."""
    try:
        data = request.get_json(silent=True) or {}
        assignment = UserService.request_role(int(get_jwt_identity()), data)
        return jsonify(assignment.to_dict()), 201
    except Exception as e:
        return error_response(e, "request role")


@user_bp.route("/role-status", methods=["GET"])
def role_status():
    try:
        session, user_church = resolve_request()
        if session is None:
            return _sign_in_required()
        return jsonify(UserService.role_status(session, user_church)), 200
    except Exception as e:
        return error_response(e, "load role status")


@user_bp.route("/role-status/stream", methods=["GET"])
def role_status_stream():
    """
    Server-Sent Events for the pending-approval page. Emits the current
    status, then a new event every time the role assignment or the session
    changes, and ends once the gate lets the identity through.
    """
    session, _ = resolve_request()
    if session is None:
        return _sign_in_required()

    app = current_app._get_current_object()
    watcher = app.extensions["role_resolver"].watch(
        session, app.extensions["session_provider"], app.extensions["change_channel"]
    )
    keepalive = app.config.get("SSE_KEEPALIVE_SECONDS", KEEPALIVE_SECONDS)

    @stream_with_context
    def stream():
        with watcher:
            snapshot = watcher.current
            while True:
                payload = UserService.role_status(watcher.session, snapshot)
                yield format_sse(payload, event="role_status")
                if evaluate(watcher.session, snapshot).allowed or watcher.session is None:
                    app.logger.info(f"Role status stream for user {session.user_id} finished")
                    return

                snapshot = None
                while snapshot is None:
                    try:
                        snapshot = watcher.next_change(timeout=keepalive)
                    except SubscriptionClosedError:
                        app.logger.info(f"Role status stream for user {session.user_id} closed by the change channel")
                        return
                    if snapshot is None:
                        yield ": keepalive\n\n"

    return Response(
        stream(),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@user_bp.route("/profile", methods=["GET"])
@jwt_required()
def get_profile():
    try:
        profile = UserService.get_profile(int(get_jwt_identity()))
        return jsonify(profile.to_dict()), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        return error_response(e, "load profile")


@user_bp.route("/profile", methods=["PUT"])
@jwt_required()
def update_profile():
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({"error": "No data provided"}), 400
        profile = UserService.update_profile(int(get_jwt_identity()), data)
        return jsonify(profile.to_dict()), 200
    except Exception as e:
        return error_response(e, "update profile")
