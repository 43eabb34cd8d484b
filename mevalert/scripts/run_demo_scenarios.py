#!/usr/bin/env python3
"""
Replay the MEV alert network demo scenarios against an in-memory hook.

Usage:
    python -m mevalert.scripts.run_demo_scenarios --scenario all
    python -m mevalert.scripts.run_demo_scenarios --scenario auction
    python -m mevalert.scripts.run_demo_scenarios --scenario alert --publish
"""

import argparse
import asyncio
import logging
import sys
from typing import Callable, Dict, Optional

from mevalert.config import HookConfig, get_config
from mevalert.config.hook_config import DEFAULT_OWNER
from mevalert.core import ETHER, Ledger, ManualClock, MevAlertHook
from mevalert.core.errors import EmergencyPausedError
from mevalert.core.events import MevAlert
from mevalert.relay import HookEventPublisher, HookQueries, RelayMonitor

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

DEMO_START = 1_700_000_000
DEMO_FUNDING = 100 * ETHER
POOL = "0x8ad599c3a0ff1de082011efddc58f1908eb6e6d8"
ALICE = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
BOB = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
EVIDENCE_HASH = "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef"

# (seconds since previous bid, bidder, raw amount)
AUCTION_BIDS = (
    (10, ALICE, ETHER // 10),
    (190, BOB, 15 * ETHER // 100),
    (80, ALICE, ETHER // 5),
)


def build_demo_hook(config: Optional[HookConfig] = None) -> MevAlertHook:
    """Deploy a hook on a fresh ledger, fund the demo accounts and register the pool."""
    ledger = Ledger()
    clock = ManualClock(start=DEMO_START)
    if config is not None:
        hook = MevAlertHook(ledger=ledger, clock=clock, **config.deployment_kwargs)
        threshold = config.DEFAULT_ALERT_THRESHOLD
        for signer in config.ORACLE_SIGNERS:
            hook.add_oracle_signer(hook.owner, signer)
    else:
        hook = MevAlertHook(owner=DEFAULT_OWNER, ledger=ledger, clock=clock)
        threshold = 5 * ETHER

    for account in (hook.owner, ALICE, BOB):
        ledger.mint(account, DEMO_FUNDING)
    hook.register_pool(hook.owner, POOL, threshold)
    return hook


def scenario_mev_alert(hook: MevAlertHook) -> bool:
    """Manual alert followed by a sandwich-shaped pair of large swaps."""
    logger.info("Scenario 1: MEV alert")
    venue = hook.venue or hook.owner
    alerts_before = len(hook.events.of_type(MevAlert))

    hook.trigger_alert(hook.owner, POOL)

    hook.after_swap(venue, POOL, BOB, -10 * ETHER, 9 * ETHER)
    hook.clock.advance(12)
    score = hook.after_swap(venue, POOL, BOB, -10 * ETHER, 9 * ETHER)
    logger.info(f"Follow-up swap scored {score}")

    alerts = len(hook.events.of_type(MevAlert)) - alerts_before
    logger.info(f"{alerts} MEV alerts raised")
    return alerts >= 2


def scenario_auction_competition(hook: MevAlertHook) -> bool:
    """Three time-weighted bids on a 300 second auction, then settlement."""
    logger.info("Scenario 2: Auction competition")
    queries = HookQueries(hook)
    auction_id = hook.start_auction(hook.owner, POOL, ETHER // 10, 300)

    for delay, bidder, amount in AUCTION_BIDS:
        hook.clock.advance(delay)
        effective = queries.place_bid(bidder, POOL, auction_id, amount)
        logger.info(f"{bidder} bid {amount}, effective {effective}")

    logger.info(f"Active auctions: {[info.auction_id for info in queries.get_active_auctions(POOL)]}")
    hook.clock.set(hook.auction(POOL, auction_id).end)
    split = hook.finalize_auction(hook.owner, POOL, auction_id)

    info = queries.get_auction(POOL, auction_id)
    logger.info(f"Auction {auction_id} settled: {info.to_dict()}")
    logger.info(f"Payout split: {split}")
    logger.info(f"Active fee override: {hook.active_fee(POOL)} bps")
    return info.settled and info.highest_bidder == ALICE


def scenario_circuit_breaker(hook: MevAlertHook) -> bool:
    """Pause, confirm users are blocked, unpause, confirm they are not."""
    logger.info("Scenario 3: Circuit breaker")
    venue = hook.venue or hook.owner
    hook.pause(hook.owner, "Demo: Simulating critical security issue")

    blocked = 0
    for attempt in (
        lambda: hook.start_auction(BOB, POOL, ETHER // 10, 300),
        lambda: hook.after_swap(venue, POOL, BOB, -ETHER, ETHER),
    ):
        try:
            attempt()
        except EmergencyPausedError as e:
            logger.info(f"Correctly blocked: {e}")
            blocked += 1

    hook.clock.advance(3)
    hook.unpause(hook.owner)
    auction_id = hook.start_auction(hook.owner, POOL, ETHER // 10, 60)
    logger.info(f"Operations resumed, auction {auction_id} started")
    return blocked == 2


def scenario_insurance(hook: MevAlertHook) -> bool:
    """Deposit 1 ETH of insurance and pay out a 0.1 ETH loss claim."""
    logger.info("Scenario 4: Insurance")
    queries = HookQueries(hook)
    initial = queries.get_insurance_fund(POOL)

    hook.deposit_insurance(hook.owner, POOL, ETHER)
    after_deposit = queries.get_insurance_fund(POOL)

    compensation = hook.claim_insurance(BOB, POOL, ETHER // 10, EVIDENCE_HASH)
    final = queries.get_insurance_fund(POOL)

    logger.info(f"Fund: initial {initial}, after deposit {after_deposit}, final {final}")
    logger.info(f"Compensation paid to {BOB}: {compensation}")
    return final == after_deposit - compensation and after_deposit == initial + ETHER


SCENARIOS: Dict[str, Callable[[MevAlertHook], bool]] = {
    "alert": scenario_mev_alert,
    "auction": scenario_auction_competition,
    "circuit-breaker": scenario_circuit_breaker,
    "insurance": scenario_insurance,
}


def run_scenarios(hook: MevAlertHook, names) -> Dict[str, bool]:
    results = {}
    for name in names:
        results[name] = SCENARIOS[name](hook)
        status = "passed" if results[name] else "FAILED"
        logger.info(f"Scenario {name} {status}")
    return results


async def main():
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Replay MEV alert network demo scenarios",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scenario",
        choices=[*SCENARIOS, "all"],
        default="all",
        help="Scenario to run",
    )
    parser.add_argument(
        "--env",
        choices=["local", "dev", "staging", "production", "test"],
        default=None,
        help="Override the configured environment",
    )
    parser.add_argument(
        "--publish", action="store_true", help="Publish committed events to NATS"
    )
    args = parser.parse_args()

    try:
        config = get_config(environment=args.env)
        hook = build_demo_hook(config.hook)

        monitor = RelayMonitor(config.environment, config=config.nats)
        monitor.attach(hook)

        publisher = None
        if args.publish:
            publisher = HookEventPublisher(config.environment, config=config.nats)
            publisher.attach(hook)
            await publisher.aconnect()

        names = list(SCENARIOS) if args.scenario == "all" else [args.scenario]
        results = run_scenarios(hook, names)

        if publisher is not None:
            await publisher.aflush()
            await publisher.aclose()

        sys.exit(0 if all(results.values()) else 1)

    except KeyboardInterrupt:
        logger.info("Demo interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)


def cli():
    asyncio.run(main())


if __name__ == "__main__":
    cli()
