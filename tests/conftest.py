import sys, pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest

from fleetdesk import create_app
from fleetdesk.config import TestConfig
from fleetdesk.models import db
from fleetdesk.services.collaborators import Notifier
from fleetdesk.utils.constants import BookingStatus, CustomerStatus
from fleetdesk.utils.intervals import Interval


class RecordingChannel:
    """Notification channel that remembers (customer_id, event) pairs."""

    def __init__(self):
        self.sent = []

    def notify(self, customer, event, **context):
        self.sent.append((customer.id, event))
        return True


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def app(tmp_path, channel):
    """
    App bound to a throwaway SQLite file (not :memory:, so that several
    threads/connections see the same database).
    """
    app = create_app(
        TestConfig,
        overrides={
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'fleetdesk-test.db'}",
            "DOCUMENT_DIR": str(tmp_path / "docs"),
        },
        notifier=Notifier({"email": channel}),
    )
    yield app
    with app.app_context():
        db.engine.dispose()


@pytest.fixture
def ctx(app):
    """Push an app context for service-level tests; the session ends with it."""
    with app.app_context():
        yield app


@pytest.fixture
def services(ctx):
    return ctx.extensions["fleetdesk"]


@pytest.fixture
def repo(services):
    return services.repo


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def fleet(repo):
    """Two vehicles and two customers (one active, one blacklisted)."""
    with repo.atomic():
        axia = repo.add_vehicle("Perodua Axia")
        vios = repo.add_vehicle("Toyota Vios", mileage_limit=250)
        alice = repo.add_customer("Alice Tan", "alice@example.com", phone="+60111111111")
        bob = repo.add_customer("Bob Lee", "bob@example.com")
        bob.status = CustomerStatus.BLACKLISTED
    return {"axia": axia, "vios": vios, "alice": alice, "bob": bob}


@pytest.fixture
def seeded_ids(app):
    """Same fleet as ``fleet`` but committed and released, for HTTP tests."""
    with app.app_context():
        repo = app.extensions["fleetdesk"].repo
        with repo.atomic():
            axia = repo.add_vehicle("Perodua Axia")
            vios = repo.add_vehicle("Toyota Vios", mileage_limit=250)
            alice = repo.add_customer("Alice Tan", "alice@example.com")
            bob = repo.add_customer("Bob Lee", "bob@example.com")
            bob.status = CustomerStatus.BLACKLISTED
        ids = {"axia": axia.id, "vios": vios.id, "alice": alice.id, "bob": bob.id}
    return ids


@pytest.fixture
def confirmed_request(services):
    """Factory: submit and confirm a booking request, return its id."""
    def _make(customer_id, vehicle_id, start, end, staff_id=7):
        req = services.bookings.submit(customer_id, vehicle_id, Interval.parse(start, end))
        services.bookings.decide(req.id, BookingStatus.CONFIRMED.value, staff_id=staff_id)
        return req.id

    return _make
