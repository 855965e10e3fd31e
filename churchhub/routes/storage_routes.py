from flask import Blueprint, current_app, g, jsonify, request

from churchhub.routes.responses import error_response
from churchhub.services.access_gate import UPLOADERS, access_gate

storage_bp = Blueprint("storage", __name__)


@storage_bp.route("/<bucket>", methods=["POST"])
@access_gate(*UPLOADERS)
def upload_file(bucket):
    """Upload one file (multipart field `file`) and return its public URL."""
    try:
        storage = current_app.extensions["blob_storage"]
        path = storage.upload(bucket, request.files.get("file"))
        current_app.logger.info(f"User {g.session.user_id} uploaded {bucket}/{path}")
        return jsonify({"path": path, "url": storage.get_public_url(bucket, path)}), 201
    except Exception as e:
        return error_response(e, "upload file")
