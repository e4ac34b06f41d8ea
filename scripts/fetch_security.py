"""Look up a security through the configured providers from the command line.

Examples:
    python -m scripts.fetch_security search AAPL --country US
    python -m scripts.fetch_security info AAPL --exchange XNAS
    python -m scripts.fetch_security prices AAPL --start 2024-01-02 --end 2024-01-31
"""

import argparse
import logging
import sys
from datetime import date

from security_data.config import configure_logging
from security_data.services.providers import ProviderRegistry, SecuritiesProviderChain

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Query securities data providers with fallback")
    parser.add_argument("command", choices=["search", "info", "price", "prices"])
    parser.add_argument("symbol", help="Ticker symbol (e.g., AAPL)")
    parser.add_argument("--country", help="ISO country code filter for search")
    parser.add_argument("--exchange", help="Exchange operating MIC (e.g., XNAS)")
    parser.add_argument("--date", type=str, help="Price date (YYYY-MM-DD). Defaults to today")
    parser.add_argument("--start", type=str, help="Start date (YYYY-MM-DD) for prices")
    parser.add_argument("--end", type=str, help="End date (YYYY-MM-DD). Defaults to today")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser.parse_args(argv)


def run(args: argparse.Namespace, chain: SecuritiesProviderChain) -> int:
    """Execute one command against the chain. Returns the process exit code."""
    if args.command == "search":
        response = chain.search_securities(
            args.symbol, country_code=args.country, exchange_operating_mic=args.exchange
        )
    elif args.command == "info":
        response = chain.fetch_security_info(args.symbol, args.exchange)
    elif args.command == "price":
        target_date = date.fromisoformat(args.date) if args.date else date.today()
        response = chain.fetch_security_price(
            args.symbol, target_date, exchange_operating_mic=args.exchange
        )
    else:
        if not args.start:
            print("❌ ERROR: --start is required for prices")
            return 2
        start_date = date.fromisoformat(args.start)
        end_date = date.fromisoformat(args.end) if args.end else date.today()
        response = chain.fetch_security_prices(
            args.symbol, start_date, end_date, exchange_operating_mic=args.exchange
        )

    if not response.success:
        print(f"❌ ERROR: {response.error}")
        return 1

    data = response.data if isinstance(response.data, list) else [response.data]
    for item in data:
        print(item)
    print(f"✅ {len(data)} result(s)")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    registry = ProviderRegistry.for_concept("securities")
    if not registry.providers:
        print("❌ ERROR: No providers configured. Set SYNTH_API_KEY and/or FMP_API_KEY")
        return 1

    chain = SecuritiesProviderChain(registry.providers)
    try:
        return run(args, chain)
    finally:
        for provider in chain.providers:
            provider.close()


if __name__ == "__main__":
    sys.exit(main())
