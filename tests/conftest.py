import pytest
from decimal import Decimal
from smartbazaar.db import Base, make_engine, make_session_factory
from smartbazaar.identity import Actor
from smartbazaar.models import Listing, User
from smartbazaar.services import OrderService
from smartbazaar.transactions import TransactionRunner

FARMER = Actor(user_id="farmer-1", role="farmer")
BUYER = Actor(user_id="buyer-1", role="buyer")
OTHER_BUYER = Actor(user_id="buyer-2", role="buyer")
STRANGER = Actor(user_id="farmer-2", role="farmer")

@pytest.fixture
def engine(tmp_path):
    # file-backed so every session gets its own connection, like a real server
    eng = make_engine(f"sqlite:///{tmp_path / 'smartbazaar-test.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()

@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)

@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def users(db):
    rows = [
        User(uid=FARMER.user_id, role="farmer", first_name="Ahmed", last_name="Khan", photo_url="http://img/ahmed"),
        User(uid=STRANGER.user_id, role="farmer", first_name="Bilal", last_name="Shah"),
        User(uid=BUYER.user_id, role="buyer", first_name="Sara", last_name="Malik"),
        User(uid=OTHER_BUYER.user_id, role="buyer", first_name="Usman", last_name="Ali"),
    ]
    db.add_all(rows)
    db.commit()
    return rows

@pytest.fixture
def make_listing(db, users):
    def _make(**kw):
        data = {
            "farmer_id": FARMER.user_id,
            "crop_name": "Tomatoes",
            "category": "Vegetables",
            "quantity": Decimal("100"),
            "unit": "kg",
            "price_per_unit": Decimal("50"),
            "location": "Multan, Punjab",
            "status": "active",
        }
        data.update(kw)
        obj = Listing(**data)
        db.add(obj)
        db.commit()
        return obj
    return _make

@pytest.fixture
def service(session_factory):
    runner = TransactionRunner(session_factory, delay=0)
    return OrderService(session_factory, delivery_charge=250, commission_rate="0.02", runner=runner)

def reload(db, obj):
    db.expire_all()
    return db.get(type(obj), obj.id)
