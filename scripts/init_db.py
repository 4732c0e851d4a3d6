#!/usr/bin/env python3
"""Create (or recreate) the engine's database tables."""
import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from atlas import create_app
from atlas.extensions import db


def init_database(reset: bool = False) -> None:
    app = create_app()
    with app.app_context():
        if reset:
            db.drop_all()
            print("Dropped existing tables")
        db.create_all()
        tables = ", ".join(sorted(db.metadata.tables))
        print(f"✅ Tables ready ({tables}) at {app.config['SQLALCHEMY_DATABASE_URI']}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize the ATLAS database.")
    parser.add_argument("--reset", action="store_true", help="Drop all tables before creating them")
    init_database(parser.parse_args().reset)
