import sys
import os

sys.path.append(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
)  # relative imports

from churchhub import create_app
from churchhub.extensions import db
from churchhub.models import Church
from churchhub.services.church_service import slugify

CHURCHES = [
    {"name": "Grace Community Church", "address": "100 Main Street"},
    {"name": "Hope Fellowship", "address": "42 River Road"},
    {"name": "New Life Chapel", "address": "7 Hill Avenue"},
]


def seed_churches():
    """Create the churches visitors can pick from on sign-up"""
    app = create_app()
    with app.app_context():
        print("Seeding churches...")
        try:
            for attrs in CHURCHES:
                slug = slugify(attrs["name"])
                if Church.query.filter_by(slug=slug).first():
                    print(f"  {attrs['name']} already exists")
                    continue
                db.session.add(Church(slug=slug, **attrs))
                print(f"  {attrs['name']} added")
            db.session.commit()
            print("Churches seeded successfully!")
        except Exception as e:
            db.session.rollback()
            print(f"Error seeding churches: {e}")

if __name__ == "__main__":
    seed_churches()
