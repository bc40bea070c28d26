import os
import sys
from datetime import datetime, timezone

import pytest

# Add the project src directory to PYTHONPATH for tests
CURRENT_DIR = os.path.dirname(__file__)
SRC_PATH = os.path.abspath(os.path.join(CURRENT_DIR, "..", "src"))
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from lodgedesk.adapters.sqlite_adapter import SQLiteBookingAdapter  # noqa: E402
from lodgedesk.session import Session  # noqa: E402

# Fixed "now" for every clock-dependent test
NOW = datetime(2024, 5, 20, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return NOW


def make_db_url(tmpdir: str) -> str:
    db_path = os.path.join(tmpdir, "lodgedesk_test.db")
    return f"sqlite:///{db_path}"


def seed_sample_rooms(db: SQLiteBookingAdapter) -> None:
    rooms = [
        ("Standard", "101", 2, "AVAILABLE"),
        ("Deluxe", "201", 3, "AVAILABLE"),
        ("Suíte Família", "301", 4, "CLEANING"),
        ("Single", "001", 1, "REPAIRS_NEEDED"),
    ]
    for name, number, capacity, status in rooms:
        db.create_room({"name": name, "number": number, "capacity": capacity, "status": status})


@pytest.fixture
def db(tmp_path):
    adapter = SQLiteBookingAdapter(make_db_url(str(tmp_path)), clock=fixed_clock)
    adapter.init()
    seed_sample_rooms(adapter)
    return adapter


@pytest.fixture
def session(db):
    return Session.local(db, clock=fixed_clock)


@pytest.fixture
def standard_room(db):
    """Room 101, capacity 2."""
    return next(r for r in db.list_rooms() if r["number"] == "101")
