#!/usr/bin/env python3
"""Run reconciliation sessions over generated contracts.

Each session goes through the three stages:
- data entry: a Faker-generated contract is computed by the reference engine,
- reconciliation: a simulated payment history is recorded row by row,
- result: the comparative indicators are frozen and exported.

Snapshots go to the backend chosen with --persistence (or PERSISTENCE_BACKEND);
exports go to the console or to JSON files.
"""

import argparse
import sys
import time
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loan_recon.config import PERSISTENCE_BACKENDS, LoanReconConfig
from loan_recon.generators import ContractGenerator, PaymentBehavior
from loan_recon.logging import get_logger, setup_logging
from loan_recon.scenarios import ReconciliationScenario
from loan_recon.sinks import ConsoleSink, JsonFileSink
from loan_recon.sinks.factory import create_persistence

logger = get_logger(__name__)


def print_summary(summaries: list[dict], elapsed: float) -> None:
    """Print a table with the headline figures of each session."""
    print("\n" + "=" * 78)
    print(f"{'Session':<34} {'Mode':<11} {'Rows':>5} {'Savings':>12} {'Abuse':>9}")
    print("-" * 78)
    for summary in summaries:
        if not summary:
            continue
        print(
            f"{summary['session_id']:<34} {summary['mode']:<11} "
            f"{summary['rows_considered']:>5} {str(summary['total_savings']):>12} "
            f"{summary['abuse_level']:>9}"
        )
    print("=" * 78)
    print(f"{len(summaries)} sessions in {elapsed:.2f}s")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run payment reconciliation sessions over generated contracts"
    )
    parser.add_argument(
        "--sessions",
        type=int,
        default=3,
        help="Number of sessions to run (default: 3)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility (default: SEED or random)",
    )
    parser.add_argument(
        "--behavior",
        type=str,
        choices=PaymentBehavior.BEHAVIORS,
        default=None,
        help="Force one payment behavior for every session",
    )
    parser.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        default=None,
        help="Installments due after this date stay open (default: today)",
    )
    parser.add_argument(
        "--persistence",
        type=str,
        choices=PERSISTENCE_BACKENDS,
        default=None,
        help="Snapshot backend (default: PERSISTENCE_BACKEND or none)",
    )
    parser.add_argument(
        "--output",
        type=str,
        choices=["console", "json"],
        default="console",
        help="Export destination (default: console)",
    )
    parser.add_argument(
        "--max-records",
        type=int,
        default=5,
        help="Rows printed per batch on the console (default: 5)",
    )

    args = parser.parse_args()

    config = LoanReconConfig.from_env()
    if args.persistence:
        config.persistence.backend = args.persistence
    seed = args.seed if args.seed is not None else config.seed

    setup_logging(config.log_level, config.log_format)

    logger.info("=" * 60)
    logger.info("Loan Reconciliation - Demo Sessions")
    logger.info("=" * 60)
    logger.info("Sessions: %d", args.sessions)
    logger.info("Seed: %s", seed)
    logger.info("Persistence: %s", config.persistence.backend)
    logger.info("Output: %s", args.output)
    logger.info("=" * 60)

    persistence = create_persistence(config)
    if args.output == "json":
        sink = JsonFileSink(config.output.json_output_dir / "exports", pretty=config.output.pretty_json)
    else:
        sink = ConsoleSink(pretty=config.output.pretty_json, max_records=args.max_records)

    contracts = ContractGenerator(seed=seed)
    summaries = []
    start = time.perf_counter()

    try:
        for contract in contracts.generate_batch(args.sessions):
            scenario = ReconciliationScenario(
                contract=contract,
                persistence=persistence,
                behavior=args.behavior,
                reference_date=args.reference_date,
                seed=seed,
                config=config,
            )
            with scenario.run() as session:
                session.publish(sink)
                session_log = get_logger(__name__, session_id=session.session_id)
                for notification in session.notifications.drain():
                    session_log.debug("%s: %s", notification.level.value, notification.message)
            summaries.append(scenario.get_summary())
    finally:
        sink.close()
        if persistence is not None and hasattr(persistence, "close"):
            persistence.close()

    print_summary(summaries, time.perf_counter() - start)


if __name__ == "__main__":
    main()
