"""Initialize the database - creates all tables."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from scoutplan.database import engine, Base
import scoutplan.models  # noqa: F401 - registers all models


def init_db():
    print("Creating all database tables...")
    Base.metadata.create_all(bind=engine)
    print("Database initialized successfully.")


if __name__ == "__main__":
    init_db()
