# Ensure project root is on sys.path so 'retoken' is importable when running pytest
# from environments that don't automatically include it.
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.resolve()
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_broadcast_registry():
    """Drop in-process broadcast channels left open by a test."""
    yield
    from retoken.crosstab import LocalBroadcastChannel

    LocalBroadcastChannel._registry.clear()
