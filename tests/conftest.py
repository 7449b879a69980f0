"""Shared test fixtures for usage-tree tests."""

import sys
from pathlib import Path

import pytest

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from usage_tree.models import InvocationRecord, SnapshotDescriptor  # noqa: E402
from usage_tree.persistence import SqliteNodeStore, TreeDB  # noqa: E402


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def snapshot():
    """A stored-looking snapshot with a 1000 ms usage cutoff."""
    return SnapshotDescriptor(id=7, customer_id=3, filter_invoked_at_millis=1000)


@pytest.fixture
def mixed_records():
    """Records spread over two packages, a nested class and a constructor."""
    return [
        InvocationRecord("com.example.order.OrderService.place(Order)", "place", 5000),
        InvocationRecord("com.example.order.OrderService.cancel(long)", "cancel", 0),
        InvocationRecord("com.example.order.OrderService(Repo)", "<init>", 2000),
        InvocationRecord("com.example.order.OrderService$Validator.check()", "check", 900),
        InvocationRecord("com.example.billing.Invoice.total()", "total", 3000),
        InvocationRecord("com.example.billing.Invoice.total()", "total", 7000),
    ]


@pytest.fixture
def tree_db(tmp_path):
    """An open tree database in a temporary directory."""
    with TreeDB(tmp_path / ".usage-tree") as db:
        yield db


@pytest.fixture
def store(tree_db):
    return SqliteNodeStore(tree_db.conn)
