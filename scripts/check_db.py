import sys
import os

sys.path.append(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
)  # relative imports

from sqlalchemy import inspect

from churchhub import create_app
from churchhub.extensions import db

app = create_app()
with app.app_context():
    try:
        with db.engine.connect():
            print("Connected to the database successfully.")
        tables = inspect(db.engine).get_table_names()
        print(f"Tables: {', '.join(sorted(tables)) or '(none, run migrations/create_tables.py)'}")
    except Exception as e:
        print(f"Failed to connect to the database: {e}")
