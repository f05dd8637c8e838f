#!/usr/bin/env python3
"""
Analyze one Solana token and print its risk report as JSON.

Usage:
    python scripts/analyze_token.py <MINT_ADDRESS> [--symbol BONK] [--name "Bonk"]

Provider keys are read from the environment or a .env file:
    SOLANA_RPC_URL, LUNARCRUSH_API_KEY, TWITTER_BEARER_TOKEN,
    SANTIMENT_API_KEY, BIRDEYE_API_KEY
"""

import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.absolute()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from token_risk import (
    EngineConfig,
    InvalidIdentifierError,
    analyze_token,
    setup_logging,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Aggregate token risk signals into a scored report",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("address", help="Token mint address (base58)")
    parser.add_argument("--symbol", default=None, help="Token symbol for social sources")
    parser.add_argument("--name", default=None, help="Token name for the post search query")
    parser.add_argument(
        "--deadline",
        type=float,
        default=None,
        help="Run deadline in seconds (default: TOKEN_RISK_DEADLINE_SECONDS or 30)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)",
    )
    parser.add_argument(
        "--log-format",
        default="text",
        choices=["text", "json"],
        help="Log format (default: text)",
    )
    return parser.parse_args()


async def main() -> int:
    args = parse_args()
    setup_logging(args.log_level, args.log_format, run_id=args.address)

    config = EngineConfig.from_env()
    if args.deadline is not None:
        config = replace(
            config,
            run_deadline_seconds=args.deadline,
            provider_timeout_seconds=min(config.provider_timeout_seconds, args.deadline),
        )

    try:
        report = await analyze_token(args.address, args.symbol, args.name, config=config)
    except InvalidIdentifierError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2

    print(report.to_json())
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
