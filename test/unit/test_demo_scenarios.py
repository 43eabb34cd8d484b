"""
Unit tests for the demo scenario script.
"""

import pytest

from mevalert.config import HookConfig
from mevalert.core.types import ETHER
from mevalert.scripts.run_demo_scenarios import (
    ALICE,
    BOB,
    POOL,
    SCENARIOS,
    build_demo_hook,
    run_scenarios,
)


class TestDemoScenarios:
    """Test cases for the demo scenarios."""

    def test_build_demo_hook(self, demo_hook):
        """Test accounts are funded and the pool registered."""
        assert demo_hook.ledger.balance_of(ALICE) == 100 * ETHER
        assert demo_hook.ledger.balance_of(BOB) == 100 * ETHER
        assert demo_hook.pool_config(POOL).alert_threshold == 5 * ETHER

    def test_build_from_config(self):
        """Test deployment settings come from the hook config."""
        config = HookConfig(DEFAULT_ALERT_THRESHOLD=ETHER, ORACLE_SIGNERS=[BOB])
        hook = build_demo_hook(config)

        assert hook.pool_config(POOL).alert_threshold == ETHER
        assert hook.oracle_signers() == [BOB]

    @pytest.mark.parametrize("name", list(SCENARIOS))
    def test_single_scenario(self, demo_hook, name):
        """Test each scenario passes on its own."""
        assert run_scenarios(demo_hook, [name]) == {name: True}

    def test_all_scenarios_in_sequence(self, demo_hook):
        """Test scenarios pass when run back to back on one hook."""
        results = run_scenarios(demo_hook, list(SCENARIOS))
        assert all(results.values())
        assert not demo_hook.emergency_state().paused
