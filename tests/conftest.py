import itertools

import mock
import pytest

from excavator import connect
from excavator import drivers
from excavator.internal.utils.time import Time
from tests.utils import ListLogger


DSN = "sqlite::memory:"
USERNAME = "root"
PASSWORD = "secret"

SCHEMA = 'CREATE TABLE "test" ("id" INTEGER PRIMARY KEY, "foo" INTEGER, "bar" TEXT, "date" TEXT)'

# every call to the monotonic clock advances it by this many seconds
TICK = 0.25


@pytest.fixture
def clock():
    ticks = itertools.count(start=1000.0, step=TICK)
    with mock.patch.object(Time, "monotonic", side_effect=lambda: next(ticks)):
        yield


@pytest.fixture
def sink():
    return ListLogger()


def _open(options):
    conn = connect(DSN, USERNAME, PASSWORD, options=options)
    # bypass the proxy so the schema does not show up in benchmarks
    conn.__wrapped__.execute(SCHEMA)
    return conn


@pytest.fixture
def conn(clock, sink):
    """Fully instrumented connection, logging into ``sink``. The connect call is already logged and cleared."""
    conn = _open({"debug": {"logger": sink}})
    sink.clear()
    yield conn
    conn.close()


@pytest.fixture
def bench_conn(clock):
    """Connection collecting benchmarks without logging."""
    conn = _open({"debug": {}})
    yield conn
    conn.close()


@pytest.fixture
def disabled_conn():
    conn = _open(None)
    yield conn
    conn.close()


@pytest.fixture
def mock_conn(clock):
    """Instrumented connection over a ``mock.Mock`` driver connection; cursors are mocks too."""
    raw = mock.Mock(name="connection")
    drivers.register_driver("mockdb", mock.Mock(name="connect", return_value=raw))
    try:
        yield connect("mockdb:", options={"debug": {}})
    finally:
        drivers.unregister_driver("mockdb")
