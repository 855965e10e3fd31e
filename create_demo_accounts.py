"""
Script to create or update one demo account per church role.
"""

from datetime import datetime

import pytz
from werkzeug.security import generate_password_hash

from churchhub import create_app
from churchhub.models import AppRole, Church, Profile, RoleStatus, User, UserRoleAssignment
from churchhub.extensions import db
from churchhub.repositories import UserRoleRepository

DEMO_PASSWORD = 'password'
DEMO_ACCOUNTS = [
    ('pastor@example.com', 'Demo Pastor', AppRole.PASTOR, RoleStatus.APPROVED),
    ('worship@example.com', 'Demo Worship Leader', AppRole.WORSHIP_TEAM, RoleStatus.APPROVED),
    ('member@example.com', 'Demo Member', AppRole.MEMBER, RoleStatus.APPROVED),
    ('pending@example.com', 'Demo Applicant', AppRole.PASTOR, RoleStatus.PENDING),
]


def main():
    """Create or update demo accounts with correct credentials."""
    app = create_app()
    with app.app_context():
        church = Church.query.order_by(Church.id).first()
        if not church:
            church = Church(name='Demo Church', slug='demo-church')
            db.session.add(church)
            db.session.commit()
            print("Created demo church")

        for email, full_name, role, status in DEMO_ACCOUNTS:
            user = User.query.filter_by(email=email).first()
            if user:
                user.password = generate_password_hash(DEMO_PASSWORD)
                print(f"Updated {email} password")
            else:
                user = User(
                    email=email,
                    password=generate_password_hash(DEMO_PASSWORD),
                    email_verified_at=datetime.now(pytz.UTC),
                )
                user.profile = Profile(full_name=full_name)
                db.session.add(user)
                db.session.flush()
                print(f"Created {email} with ID: {user.id}")

            assignment = UserRoleRepository.find_open_for_user(user.id)
            if assignment is None:
                assignment = UserRoleAssignment(user_id=user.id, church_id=church.id)
                db.session.add(assignment)
            assignment.role = role
            assignment.status = status
            db.session.commit()
            print(f"  {role.label} at {church.name}: {status.value}")

        print(f"\nDemo accounts ready (password: {DEMO_PASSWORD})")

if __name__ == '__main__':
    main()
