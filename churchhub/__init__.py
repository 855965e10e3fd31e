from flask import Flask, send_from_directory
from flask_cors import CORS
from dotenv import load_dotenv
import os
from churchhub.extensions import db, migrate, jwt, limiter
from churchhub.utils.email import mail
from datetime import timedelta
import logging

# Load environment variables
load_dotenv()


def create_app(config_overrides=None):
    app = Flask(__name__)

    # Set testing mode from environment variable
    app.config["TESTING"] = os.getenv("FLASK_ENV") in ["development", "testing"]

    # Configure logging
    logging.basicConfig(level=logging.INFO)
    app.logger.setLevel(logging.INFO)

    # Configure database
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv(
        "DATABASE_URL", "postgresql://localhost/churchhub"
    )
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # Configure JWT
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY", "your-secret-key")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(days=1)
    app.config["JWT_REFRESH_TOKEN_EXPIRES"] = timedelta(days=30)
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]
    app.config["JWT_HEADER_NAME"] = "Authorization"
    app.config["JWT_HEADER_TYPE"] = "Bearer"

    # Email configuration
    app.config["MAIL_SERVER"] = os.getenv("MAIL_SERVER")
    app.config["MAIL_PORT"] = int(os.getenv("MAIL_PORT", 587))
    app.config["MAIL_USE_TLS"] = os.getenv("MAIL_USE_TLS", "true").lower() in ["true", "1", "t"]
    app.config["MAIL_USERNAME"] = os.getenv("MAIL_USERNAME")
    app.config["MAIL_PASSWORD"] = os.getenv("MAIL_PASSWORD")
    app.config["CLIENT_URL"] = os.getenv("CLIENT_URL", "http://localhost:3000")
    app.config["REQUIRE_EMAIL_VERIFICATION"] = os.getenv(
        "REQUIRE_EMAIL_VERIFICATION", "true"
    ).lower() in ["true", "1", "t"]
    app.config["EMAIL_VERIFICATION_MAX_AGE"] = int(
        os.getenv("EMAIL_VERIFICATION_MAX_AGE", 3 * 24 * 3600)
    )

    # Uploaded media
    app.config["STORAGE_ROOT"] = os.getenv(
        "STORAGE_ROOT",
        os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "storage"),
    )
    app.config["STORAGE_PUBLIC_URL"] = os.getenv("STORAGE_PUBLIC_URL", "")
    app.config["MAX_UPLOAD_MB"] = int(os.getenv("MAX_UPLOAD_MB", 50))

    # Rate limiting using flask-limiter
    app.config["RATELIMIT_DEFAULT"] = "150 per minute;10000 per hour;100000 per day"
    app.config["RATELIMIT_STORAGE_URI"] = os.getenv("LIMITER_DATABASE_URL", "memory://")
    app.config["RATELIMIT_ENABLED"] = os.getenv("RATELIMIT_ENABLED", "true").lower() in ["true", "1", "t"]

    if config_overrides:
        app.config.update(config_overrides)

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)
    limiter.init_app(app)

    from churchhub.repositories import UserRepository

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return UserRepository.is_token_revoked(jwt_payload["jti"])

    # Collaborators shared by every request; built here so tests get fresh ones
    from churchhub.notifications import ChangeChannel
    from churchhub.services.session_provider import SessionProvider
    from churchhub.services.tenant_role_resolver import TenantRoleResolver
    from churchhub.services.approval_service import ApprovalWorkflow
    from churchhub.services.storage_service import BlobStorage

    channel = ChangeChannel()
    app.extensions["change_channel"] = channel
    app.extensions["session_provider"] = SessionProvider()
    app.extensions["role_resolver"] = TenantRoleResolver()
    app.extensions["approval_workflow"] = ApprovalWorkflow(channel)
    app.extensions["blob_storage"] = BlobStorage(
        app.config["STORAGE_ROOT"],
        app.config["STORAGE_PUBLIC_URL"],
        app.config["MAX_UPLOAD_MB"],
    )

    # Register blueprints
    from churchhub.routes.user_routes import user_bp
    from churchhub.routes.church_routes import church_bp
    from churchhub.routes.content_routes import content_bp
    from churchhub.routes.admin_routes import admin_bp
    from churchhub.routes.storage_routes import storage_bp

    app.register_blueprint(user_bp, url_prefix="/api/user")
    app.register_blueprint(church_bp, url_prefix="/api")
    app.register_blueprint(content_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(storage_bp, url_prefix="/api/storage")

    # Set up CORS
    cors_origins = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5001",
    ).split(",")
    app.logger.info(f"Initializing CORS with origins: {cors_origins}")

    CORS(
        app,
        resources={
            r"/api/*": {"origins": cors_origins},
            r"/storage/*": {"origins": cors_origins},
        },
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
        expose_headers=["Content-Type"],
    )

    # Serve uploaded media
    @app.route("/storage/<bucket>/<path:filename>")
    def serve_storage(bucket, filename):
        storage = app.extensions["blob_storage"]
        try:
            directory = storage.bucket_path(bucket)
        except ValueError:
            return {"error": "Unknown bucket"}, 404
        return send_from_directory(directory, filename)

    return app


def dispose(app):
    """Releases long-lived listeners. Called once when the process exits."""
    app.extensions["change_channel"].dispose()
    app.logger.info("Change channel disposed")
