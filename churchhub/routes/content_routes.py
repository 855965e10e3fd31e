from flask import Blueprint, g, jsonify, request

from churchhub.routes.responses import error_response
from churchhub.services.access_gate import access_gate, resolve_request
from churchhub.services.church_service import ChurchService
from churchhub.services.dashboard_service import DashboardService
from churchhub.services.event_service import EventService, HOME_PREVIEW_LIMIT
from churchhub.services.financial_service import FinancialService
from churchhub.services.mission_service import MissionService
from churchhub.services.scoped_query import ScopedQueryBuilder
from churchhub.services.sermon_service import SermonService
from churchhub.services.song_service import SongService

content_bp = Blueprint("content", __name__)


def _viewer_scope():
    session, user_church = resolve_request()
    return ScopedQueryBuilder(user_church, session.user_id if session else None)


def _selected_church():
    """
    The church picked with ?church=<id or slug>. Returns (found, church_id);
    found is False when a church was named but does not exist.
    """
    value = request.args.get("church")
    if value is None or not value.strip():
        return True, None
    church_id = ChurchService.resolve_selection(value)
    return church_id is not None, church_id


def _church_not_found():
    return jsonify({"error": "Church not found"}), 404


@content_bp.route("/home", methods=["GET"])
def home():
    try:
        found, church_id = _selected_church()
        if not found:
            return _church_not_found()

        scope = _viewer_scope()
        events = EventService.get_upcoming_events(scope, church_id, limit=HOME_PREVIEW_LIMIT)
        latest_sermon = SermonService.get_latest_sermon(scope)
        return jsonify(
            {
                "upcoming_events": [event.to_dict() for event in events],
                "latest_sermon": latest_sermon.to_dict() if latest_sermon else None,
            }
        )
    except Exception as e:
        return error_response(e, "load home page")


@content_bp.route("/events", methods=["GET"])
def get_events():
    try:
        found, church_id = _selected_church()
        if not found:
            return _church_not_found()

        events = EventService.get_upcoming_events(_viewer_scope(), church_id)
        return jsonify([event.to_dict() for event in events])
    except Exception as e:
        return error_response(e, "retrieve events")


@content_bp.route("/sermons", methods=["GET"])
def get_sermons():
    try:
        scope = _viewer_scope()
        sermons = SermonService.get_sermons(scope, request.args.get("q"))
        members_only = not scope.viewer.is_admin and scope.own_church_id is None
        return jsonify(
            {
                "sermons": [sermon.to_dict() for sermon in sermons],
                "members_only": members_only,
            }
        )
    except Exception as e:
        return error_response(e, "retrieve sermons")


@content_bp.route("/songs", methods=["GET"])
def get_songs():
    try:
        scope = _viewer_scope()
        songs = SongService.get_songs(scope, request.args.get("q"))
        members_only = not scope.viewer.is_admin and scope.own_church_id is None
        return jsonify({"songs": [song.to_dict() for song in songs], "members_only": members_only})
    except Exception as e:
        return error_response(e, "retrieve songs")


@content_bp.route("/song-lists", methods=["GET"])
def get_song_lists():
    try:
        song_lists = SongService.get_song_lists(_viewer_scope())
        return jsonify([song_list.to_dict() for song_list in song_lists])
    except Exception as e:
        return error_response(e, "retrieve song lists")


@content_bp.route("/missions", methods=["GET"])
def get_missions():
    try:
        found, church_id = _selected_church()
        if not found:
            return _church_not_found()

        missions = MissionService.get_missions(_viewer_scope(), church_id)
        return jsonify([mission.to_dict() for mission in missions])
    except Exception as e:
        return error_response(e, "retrieve missions")


@content_bp.route("/giving", methods=["GET"])
def get_giving():
    try:
        found, church_id = _selected_church()
        if not found:
            return _church_not_found()

        return jsonify(FinancialService.get_public_allocations(_viewer_scope(), church_id))
    except Exception as e:
        return error_response(e, "load giving")


@content_bp.route("/dashboard", methods=["GET"])
@access_gate()
def get_dashboard():
    return jsonify(DashboardService.get_dashboard(g.user_church))
