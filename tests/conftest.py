"""
Shared pytest fixtures.

Provides:
    - app: Flask application on in-memory SQLite (session-scoped)
    - database: per-test table recreation (autouse)
    - client: Flask test client
    - make_church / make_member / auth_headers: factories for tenants,
      identities with a role assignment, and bearer headers
"""
from datetime import datetime

import pytest
import pytz
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash

from churchhub import create_app
from churchhub.extensions import db as _db
from churchhub.models import AppRole, Church, Profile, RoleStatus, User, UserRoleAssignment
from churchhub.services.scoped_query import ScopedQueryBuilder
from churchhub.services.session_provider import Session

PASSWORD = "secret123"


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create the Flask application once per test session."""
    application = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "JWT_SECRET_KEY": "test-secret-key",
            "RATELIMIT_ENABLED": False,
            "REQUIRE_EMAIL_VERIFICATION": True,
            "STORAGE_ROOT": str(tmp_path_factory.mktemp("storage")),
            "MAX_UPLOAD_MB": 1,
            "SSE_KEEPALIVE_SECONDS": 0.1,
        }
    )
    return application


@pytest.fixture(autouse=True)
def database(app):
    """Per-test: open app context with fresh tables."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def make_church():
    def factory(name="Grace Community", slug=None):
        church = Church(name=name, slug=slug or name.lower().replace(" ", "-"))
        _db.session.add(church)
        _db.session.commit()
        return church

    return factory


@pytest.fixture()
def make_member():
    """Verified identity with a profile and, when church is given, one role row."""

    def factory(email, church=None, role=AppRole.MEMBER, status=RoleStatus.APPROVED, verified=True):
        user = User(
            email=email,
            password=generate_password_hash(PASSWORD),
            email_verified_at=datetime.now(pytz.UTC) if verified else None,
        )
        user.profile = Profile(full_name=email.split("@")[0].title())
        _db.session.add(user)
        _db.session.flush()
        if church is not None:
            _db.session.add(
                UserRoleAssignment(user_id=user.id, church_id=church.id, role=role, status=status)
            )
        _db.session.commit()
        return user

    return factory


@pytest.fixture()
def password():
    """Plain-text password of every identity made by make_member."""
    return PASSWORD


@pytest.fixture()
def auth_headers():
    def factory(user):
        return {"Authorization": f"Bearer {create_access_token(identity=str(user.id))}"}

    return factory


@pytest.fixture()
def resolve(app):
    """Resolves an identity's UserChurch snapshot directly."""

    def factory(user):
        if user is None:
            return app.extensions["role_resolver"].resolve(None)
        return app.extensions["role_resolver"].resolve(Session(user_id=user.id, email=user.email))

    return factory


@pytest.fixture()
def scope_for(resolve):
    """ScopedQueryBuilder for an identity (or an anonymous visitor with None)."""

    def factory(user):
        return ScopedQueryBuilder(resolve(user), user.id if user else None)

    return factory


@pytest.fixture()
def grace(make_church):
    return make_church("Grace Community", "grace")


@pytest.fixture()
def hope(make_church):
    return make_church("Hope Fellowship", "hope")


@pytest.fixture()
def admin(make_member, grace):
    return make_member("admin@example.com", grace, AppRole.ADMIN)


@pytest.fixture()
def pastor(make_member, grace):
    return make_member("pastor@example.com", grace, AppRole.PASTOR)


@pytest.fixture()
def worship_leader(make_member, grace):
    return make_member("worship@example.com", grace, AppRole.WORSHIP_TEAM)


@pytest.fixture()
def member(make_member, grace):
    return make_member("member@example.com", grace, AppRole.MEMBER)
