import sys
from pathlib import Path

import pytest

# Ensure 'src' (and this folder, for the fakes) are importable without installing the package
ROOT = Path(__file__).resolve().parents[1]
for path in (ROOT / "src", ROOT / "tests"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from apdoom.client import ApDoomClient  # noqa: E402
from apdoom.settings import ApSettings  # noqa: E402
from fakes import FakeClock, FakeTransport, RecordingCallbacks, make_catalog  # noqa: E402


@pytest.fixture
def catalog():
    return make_catalog()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def callbacks():
    return RecordingCallbacks()


@pytest.fixture
def settings(tmp_path: Path) -> ApSettings:
    return ApSettings(server="localhost:38281", game="test", player_name="Ab", save_dir=str(tmp_path))


@pytest.fixture
def make_client(catalog, callbacks, settings, clock):
    """Build a client around a scripted transport; catalog and settings can be swapped."""

    def _make(transport=None, catalog_=None, settings_=None):
        return ApDoomClient(
            catalog_ or catalog,
            transport or FakeTransport(),
            callbacks,
            settings_ or settings,
            clock=clock,
            sleep=clock.sleep,
        )

    return _make
