from datetime import datetime
import os

import pytz
from werkzeug.security import generate_password_hash

from churchhub import create_app
from churchhub.extensions import db
from churchhub.models import AppRole, Church, Profile, RoleStatus, User, UserRoleAssignment
from churchhub.repositories import UserRoleRepository

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
CHURCH_NAME = os.getenv("ADMIN_CHURCH_NAME", "Grace Community Church")
CHURCH_SLUG = os.getenv("ADMIN_CHURCH_SLUG", "grace-community")


def create_admin_user(update=False):
    """
    Bootstraps the first administrator: approvals need an approved admin, so
    the first one has to be written directly.
    """
    app = create_app()
    with app.app_context():
        church = Church.query.filter_by(slug=CHURCH_SLUG).first()
        if not church:
            church = Church(name=CHURCH_NAME, slug=CHURCH_SLUG)
            db.session.add(church)
            db.session.flush()
            print(f"Church '{church.name}' created")

        admin = User.query.filter_by(email=ADMIN_EMAIL).first()
        if not admin:
            admin = User(
                email=ADMIN_EMAIL,
                password=generate_password_hash(ADMIN_PASSWORD),
                email_verified_at=datetime.now(pytz.UTC),
            )
            admin.profile = Profile(full_name="Admin User")
            db.session.add(admin)
            db.session.flush()
            print("Admin user created successfully!")
        elif update:
            admin.password = generate_password_hash(ADMIN_PASSWORD)
            admin.email_verified_at = admin.email_verified_at or datetime.now(pytz.UTC)
            print("Admin user updated successfully!")
        else:
            print("Admin user already exists!")

        assignment = UserRoleRepository.find_open_for_user(admin.id)
        if assignment is None:
            assignment = UserRoleAssignment(user_id=admin.id, church_id=church.id)
            db.session.add(assignment)
        assignment.role = AppRole.ADMIN
        assignment.status = RoleStatus.APPROVED
        assignment.reviewed_at = assignment.reviewed_at or datetime.now(pytz.UTC)
        db.session.commit()
        print(f"{admin.email} is an approved admin of {church.name}")

if __name__ == '__main__':
    create_admin_user(update=True)
