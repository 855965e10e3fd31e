import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from churchhub import create_app
from churchhub.extensions import db
import churchhub.models  # noqa: F401


def create_tables():
    app = create_app()
    with app.app_context():
        # Create all tables, including the partial unique index on user_roles
        db.create_all()
        print(f"Created database tables: {', '.join(sorted(db.metadata.tables))}")

if __name__ == "__main__":
    create_tables()
