import pytest

from mevalert.scripts.run_demo_scenarios import build_demo_hook


@pytest.fixture
def demo_hook():
    # Fresh in-memory deployment; nothing here touches NATS
    return build_demo_hook()
