from flask import Blueprint, current_app, g, jsonify, request

from churchhub.routes.responses import error_response
from churchhub.services.access_gate import (
    ADMINS,
    EVENT_MANAGERS,
    MISSION_MANAGERS,
    SERMON_MANAGERS,
    SONG_MANAGERS,
    access_gate,
)
from churchhub.services.church_service import ChurchService
from churchhub.services.event_service import EventService
from churchhub.services.financial_service import FinancialService
from churchhub.services.mission_service import MissionService
from churchhub.services.scoped_query import ScopedQueryBuilder
from churchhub.services.sermon_service import SermonService
from churchhub.services.song_service import SongService
from churchhub.validators import parse_int, selected_church

admin_bp = Blueprint("admin", __name__)


def _scope():
    return ScopedQueryBuilder(g.user_church, g.session.user_id)


def _listed_church():
    """?church_id= narrows an admin's listing to one church."""
    value = request.args.get("church_id")
    return parse_int(value, "church_id") if value else None


def _payload():
    return request.get_json(silent=True) or {}


# -- role approval -----------------------------------------------------------


@admin_bp.route("/users", methods=["GET"])
@access_gate(*ADMINS)
def get_all_users():
    """All role requests with profiles (admin only)"""
    try:
        workflow = current_app.extensions["approval_workflow"]
        return jsonify(workflow.list_assignments(g.user_church, _listed_church()))
    except Exception as e:
        return error_response(e, "retrieve users")


def _decide(assignment_id, decision):
    workflow = current_app.extensions["approval_workflow"]
    assignment, changed = workflow.decide(assignment_id, decision, g.user_church, g.session.user_id)
    return jsonify({"assignment": assignment.to_dict(), "changed": changed})


@admin_bp.route("/users/<int:assignment_id>/approve", methods=["POST"])
@access_gate(*ADMINS)
def approve_user(assignment_id):
    try:
        return _decide(assignment_id, "approve")
    except Exception as e:
        return error_response(e, "approve user")


@admin_bp.route("/users/<int:assignment_id>/reject", methods=["POST"])
@access_gate(*ADMINS)
def reject_user(assignment_id):
    try:
        return _decide(assignment_id, "reject")
    except Exception as e:
        return error_response(e, "reject user")


# -- sermons -----------------------------------------------------------------


@admin_bp.route("/sermons", methods=["GET"])
@access_gate(*SERMON_MANAGERS)
def get_managed_sermons():
    try:
        sermons = SermonService.get_managed_sermons(_scope(), _listed_church())
        return jsonify([sermon.to_dict() for sermon in sermons])
    except Exception as e:
        return error_response(e, "retrieve sermons")


@admin_bp.route("/sermons", methods=["POST"])
@access_gate(*SERMON_MANAGERS)
def create_sermon():
    try:
        data = _payload()
        sermon = SermonService.create_sermon(_scope(), data, selected_church(data))
        current_app.logger.info(f"User {g.session.user_id} created sermon {sermon.id}")
        return jsonify(sermon.to_dict()), 201
    except Exception as e:
        return error_response(e, "create sermon")


@admin_bp.route("/sermons/<int:sermon_id>", methods=["PUT"])
@access_gate(*SERMON_MANAGERS)
def update_sermon(sermon_id):
    try:
        sermon = SermonService.update_sermon(_scope(), sermon_id, _payload())
        return jsonify(sermon.to_dict())
    except Exception as e:
        return error_response(e, "update sermon")


@admin_bp.route("/sermons/<int:sermon_id>", methods=["DELETE"])
@access_gate(*SERMON_MANAGERS)
def delete_sermon(sermon_id):
    try:
        SermonService.delete_sermon(_scope(), sermon_id)
        return jsonify({"message": "Sermon deleted"})
    except Exception as e:
        return error_response(e, "delete sermon")


# -- events ------------------------------------------------------------------


@admin_bp.route("/events", methods=["GET"])
@access_gate(*EVENT_MANAGERS)
def get_managed_events():
    try:
        events = EventService.get_managed_events(_scope(), _listed_church())
        return jsonify([event.to_dict() for event in events])
    except Exception as e:
        return error_response(e, "retrieve events")


@admin_bp.route("/events", methods=["POST"])
@access_gate(*EVENT_MANAGERS)
def create_event():
    try:
        data = _payload()
        event = EventService.create_event(_scope(), data, selected_church(data))
        current_app.logger.info(f"User {g.session.user_id} created event {event.id}")
        return jsonify(event.to_dict()), 201
    except Exception as e:
        return error_response(e, "create event")


@admin_bp.route("/events/<int:event_id>", methods=["PUT"])
@access_gate(*EVENT_MANAGERS)
def update_event(event_id):
    try:
        event = EventService.update_event(_scope(), event_id, _payload())
        return jsonify(event.to_dict())
    except Exception as e:
        return error_response(e, "update event")


@admin_bp.route("/events/<int:event_id>", methods=["DELETE"])
@access_gate(*EVENT_MANAGERS)
def delete_event(event_id):
    try:
        EventService.delete_event(_scope(), event_id)
        return jsonify({"message": "Event deleted"})
    except Exception as e:
        return error_response(e, "delete event")


# -- songs and song lists ----------------------------------------------------


@admin_bp.route("/songs", methods=["GET"])
@access_gate(*SONG_MANAGERS)
def get_managed_songs():
    try:
        songs = SongService.get_managed_songs(_scope(), _listed_church())
        return jsonify([song.to_dict() for song in songs])
    except Exception as e:
        return error_response(e, "retrieve songs")


@admin_bp.route("/songs", methods=["POST"])
@access_gate(*SONG_MANAGERS)
def create_song():
    try:
        data = _payload()
        song = SongService.create_song(_scope(), data, selected_church(data))
        return jsonify(song.to_dict()), 201
    except Exception as e:
        return error_response(e, "create song")


@admin_bp.route("/songs/<int:song_id>", methods=["PUT"])
@access_gate(*SONG_MANAGERS)
def update_song(song_id):
    try:
        song = SongService.update_song(_scope(), song_id, _payload())
        return jsonify(song.to_dict())
    except Exception as e:
        return error_response(e, "update song")


@admin_bp.route("/songs/<int:song_id>", methods=["DELETE"])
@access_gate(*SONG_MANAGERS)
def delete_song(song_id):
    try:
        SongService.delete_song(_scope(), song_id)
        return jsonify({"message": "Song deleted"})
    except Exception as e:
        return error_response(e, "delete song")


@admin_bp.route("/song-lists", methods=["GET"])
@access_gate(*SONG_MANAGERS)
def get_managed_song_lists():
    try:
        song_lists = SongService.get_song_lists(_scope(), _listed_church())
        return jsonify([song_list.to_dict() for song_list in song_lists])
    except Exception as e:
        return error_response(e, "retrieve song lists")


@admin_bp.route("/song-lists", methods=["POST"])
@access_gate(*SONG_MANAGERS)
def create_song_list():
    try:
        data = _payload()
        song_list = SongService.create_song_list(_scope(), data, selected_church(data))
        return jsonify(song_list.to_dict()), 201
    except Exception as e:
        return error_response(e, "create song list")


@admin_bp.route("/song-lists/<int:song_list_id>", methods=["PUT"])
@access_gate(*SONG_MANAGERS)
def update_song_list(song_list_id):
    try:
        song_list = SongService.update_song_list(_scope(), song_list_id, _payload())
        return jsonify(song_list.to_dict())
    except Exception as e:
        return error_response(e, "update song list")


@admin_bp.route("/song-lists/<int:song_list_id>", methods=["DELETE"])
@access_gate(*SONG_MANAGERS)
def delete_song_list(song_list_id):
    try:
        SongService.delete_song_list(_scope(), song_list_id)
        return jsonify({"message": "Song list deleted"})
    except Exception as e:
        return error_response(e, "delete song list")


# -- missions ----------------------------------------------------------------


@admin_bp.route("/missions", methods=["GET"])
@access_gate(*MISSION_MANAGERS)
def get_managed_missions():
    try:
        missions = MissionService.get_managed_missions(_scope(), _listed_church())
        return jsonify([mission.to_dict() for mission in missions])
    except Exception as e:
        return error_response(e, "retrieve missions")


@admin_bp.route("/missions", methods=["POST"])
@access_gate(*MISSION_MANAGERS)
def create_mission():
    try:
        data = _payload()
        mission = MissionService.create_mission(_scope(), data, selected_church(data))
        return jsonify(mission.to_dict()), 201
    except Exception as e:
        return error_response(e, "create mission")


@admin_bp.route("/missions/<int:mission_id>", methods=["PUT"])
@access_gate(*MISSION_MANAGERS)
def update_mission(mission_id):
    try:
        mission = MissionService.update_mission(_scope(), mission_id, _payload())
        return jsonify(mission.to_dict())
    except Exception as e:
        return error_response(e, "update mission")


@admin_bp.route("/missions/<int:mission_id>", methods=["DELETE"])
@access_gate(*MISSION_MANAGERS)
def delete_mission(mission_id):
    try:
        MissionService.delete_mission(_scope(), mission_id)
        return jsonify({"message": "Mission deleted"})
    except Exception as e:
        return error_response(e, "delete mission")


# -- financial records -------------------------------------------------------


@admin_bp.route("/financial-records", methods=["GET"])
@access_gate(*ADMINS)
def get_financial_records():
    try:
        return jsonify(FinancialService.get_managed_records(_scope(), _listed_church()))
    except Exception as e:
        return error_response(e, "retrieve financial records")


@admin_bp.route("/financial-records", methods=["POST"])
@access_gate(*ADMINS)
def create_financial_record():
    try:
        data = _payload()
        record = FinancialService.create_record(_scope(), data, selected_church(data))
        current_app.logger.info(f"User {g.session.user_id} recorded {record.record_type} {record.amount}")
        return jsonify(record.to_dict()), 201
    except Exception as e:
        return error_response(e, "create financial record")


@admin_bp.route("/financial-records/<int:record_id>", methods=["PUT"])
@access_gate(*ADMINS)
def update_financial_record(record_id):
    try:
        record = FinancialService.update_record(_scope(), record_id, _payload())
        return jsonify(record.to_dict())
    except Exception as e:
        return error_response(e, "update financial record")


@admin_bp.route("/financial-records/<int:record_id>", methods=["DELETE"])
@access_gate(*ADMINS)
def delete_financial_record(record_id):
    try:
        FinancialService.delete_record(_scope(), record_id)
        return jsonify({"message": "Financial record deleted"})
    except Exception as e:
        return error_response(e, "delete financial record")


# -- churches ----------------------------------------------------------------


@admin_bp.route("/churches", methods=["POST"])
@access_gate(*ADMINS)
def create_church():
    try:
        church = ChurchService.create_church(g.user_church, _payload())
        return jsonify(church.to_dict()), 201
    except Exception as e:
        return error_response(e, "create church")


@admin_bp.route("/churches/<int:church_id>", methods=["PUT"])
@access_gate(*ADMINS)
def update_church(church_id):
    try:
        church = ChurchService.update_church(g.user_church, church_id, _payload())
        return jsonify(church.to_dict())
    except Exception as e:
        return error_response(e, "update church")
