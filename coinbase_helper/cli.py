"""
Command line tools.

helper-env-check       Validate the dotenv file, settings and credentials.
helper-request-orders  Dump filled orders placed outside advanced trade.
"""

import argparse
import sys
from datetime import datetime, timezone
from typing import List, Optional
import logging

import orjson

from .auth.key_manager import load_credentials
from .client import CoinbaseHelperClient
from .config import load_settings, resolve_env_path
from .exceptions import HelperError
from .logging_config import format_error, setup_logging
from .models import OrderPlacementSource, OrderStatus
from .utils.order_log import format_order

logger = logging.getLogger(__name__)

# Start of the account's order history
COINBASE_EPOCH = "2024-01-01T00:00:00.000Z"


def _parse(parser: argparse.ArgumentParser, argv: Optional[List[str]]):
    """
    Parse arguments without exiting.

    Returns:
        (namespace, None) or (None, exit code): 0 after --help, 1 on bad usage
    """
    try:
        return parser.parse_args(argv), None
    except SystemExit as e:
        return None, 0 if e.code in (0, None) else 1


def utc_now_iso() -> str:
    """Current UTC time as 2024-01-01T00:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def env_check(argv: Optional[List[str]] = None) -> int:
    """
    Validate helper environment and Coinbase credentials.

    Returns:
        Exit code (0 valid or help shown, 1 otherwise)
    """
    parser = argparse.ArgumentParser(
        prog="helper-env-check",
        description="Validate helper environment and Coinbase credentials."
    )
    parser.add_argument(
        "--env-file",
        metavar="PATH",
        help="Override env file path (default: $HELPER_ENV_FILE or $XDG_CONFIG_HOME/helper/.env)"
    )

    args, code = _parse(parser, argv)
    if args is None:
        return code

    env_path = resolve_env_path(args.env_file)

    try:
        if not env_path.is_file():
            raise HelperError(f"env file not found: {env_path}")

        settings = load_settings(args.env_file)
        setup_logging(settings.log_level)
        load_credentials(settings.coinbase_credentials_path)
    except HelperError as e:
        print(f"Environment validation failed: {format_error(e)}", file=sys.stderr)
        return 1

    print("Environment configuration is valid.")
    print(f"Env file: {env_path}")
    print(f"Credentials file: {settings.coinbase_credentials_path}")
    return 0


def request_orders(argv: Optional[List[str]] = None) -> int:
    """
    Print every FILLED order with unknown placement source since COINBASE_EPOCH.

    Returns:
        Exit code (0 on success, 1 on failure)
    """
    parser = argparse.ArgumentParser(
        prog="helper-request-orders",
        description="List filled orders placed outside advanced trade."
    )
    parser.add_argument("--env-file", metavar="PATH", help="Override env file path")
    parser.add_argument(
        "--format",
        choices=("json", "text"),
        default="json",
        help="Output format (default: json)"
    )

    args, code = _parse(parser, argv)
    if args is None:
        return code

    try:
        settings = load_settings(args.env_file)
        setup_logging(settings.log_level)

        with CoinbaseHelperClient(settings) as client:
            orders = client.get_orders(
                OrderStatus.FILLED,
                OrderPlacementSource.UNKNOWN,
                None,
                COINBASE_EPOCH,
                utc_now_iso()
            )
    except HelperError as e:
        print(format_error(e), file=sys.stderr)
        return 1

    if args.format == "text":
        for order in orders:
            print("\n".join(format_order(order)))
    else:
        payload = [order.model_dump(mode="json") for order in orders]
        print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())

    return 0


def env_check_main() -> None:
    sys.exit(env_check())


def request_orders_main() -> None:
    sys.exit(request_orders())
