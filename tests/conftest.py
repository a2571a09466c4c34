import pytest

from models import Item, Participant
from split_ledger import SplitLedger
from store import MemoryStore


@pytest.fixture
def alice():
    return Participant("u1", "Alice")


@pytest.fixture
def bob():
    return Participant("u2", "Bob")


@pytest.fixture
def participants(alice, bob):
    """Two trip participants."""
    return [alice, bob]


@pytest.fixture
def costco_items():
    """Milk $4 x1 and Eggs $6 x2 (Eggs total $12)."""
    return [
        Item("i1", "Milk", price=4.00, quantity=1),
        Item("i2", "Eggs", price=6.00, quantity=2),
    ]


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ledger(store):
    return SplitLedger(store)
