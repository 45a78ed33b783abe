"""Command-line entry point: analyze one Solana wallet.

Usage:
    python -m jitterhands.main <wallet> [--json] [--log-level DEBUG]
"""

import argparse
import asyncio
import json
import sys

from loguru import logger

from config.settings import settings
from jitterhands.analyzer import InvalidWalletError, WalletAnalyzer
from jitterhands.models.wallet import WalletReport
from jitterhands.parsers.solana_rpc import SolanaRpcError
from jitterhands.utils.logger import setup_logger


def format_report(report: WalletReport) -> str:
    s = report.summary
    lines = [
        f"Wallet:        {report.wallet}",
        f"Transactions:  {report.transaction_count} ({report.source or 'n/a'})",
        f"Tokens:        {s.token_count} ({s.sold_count} sold, {s.partial_count} partial, "
        f"{s.never_sold_count} never sold)",
        f"Total cost:    ${s.total_cost:,.2f}",
        f"Proceeds:      ${s.total_proceeds:,.2f}",
        f"Held value:    ${s.total_current_value:,.2f}",
        f"Missed gains:  ${s.total_missed_gains_current:,.2f} (ATH: ${s.total_missed_gains_ath:,.2f})",
        f"Avg ROI:       {s.avg_roi:.1f}% (if held: {s.avg_roi_if_held:.1f}%)",
        f"Jitter score:  {s.jitter_score}/100",
    ]
    for insight in report.insights:
        lines.append(f"- {insight.title}: {insight.description}")
    return "\n".join(lines)


async def run(wallet: str, *, as_json: bool) -> int:
    async with WalletAnalyzer(settings) as analyzer:
        try:
            report = await analyzer.analyze(wallet)
        except InvalidWalletError as e:
            logger.error(str(e))
            return 2
        except SolanaRpcError as e:
            logger.error(f"Could not fetch wallet history: {e}")
            return 1

    if as_json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_report(report))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="JitterHands Solana wallet analyzer")
    parser.add_argument("wallet", help="Solana wallet address")
    parser.add_argument("--json", action="store_true", help="print the full JSON report")
    parser.add_argument("--log-level", default=settings.log_level)
    args = parser.parse_args(argv)

    setup_logger(json_logs=settings.json_logs, level=args.log_level, log_dir=settings.log_dir or None)
    return asyncio.run(run(args.wallet, as_json=args.json))


if __name__ == "__main__":
    sys.exit(main())
