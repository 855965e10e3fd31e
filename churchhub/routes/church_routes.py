from flask import Blueprint, jsonify

from churchhub.services.church_service import ChurchService

church_bp = Blueprint("church", __name__)


@church_bp.route("/churches", methods=["GET"])
def get_churches():
    """Public list for the church picker on sign-up and the visitor pages."""
    churches = ChurchService.get_churches()
    return jsonify([church.to_dict() for church in churches])
