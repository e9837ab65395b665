#!/usr/bin/env python3
"""Command line entry point for the ERC-20 bridge client.

Lists bridge tokens, reads registration status, registers tokens (optionally
waiting for the proof and confirming it) and sends tokens across the bridge.
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from dotenv import load_dotenv


# Configure logging before any other imports create loggers
def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level: int = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


# Get logger for this module
logger = logging.getLogger(__name__)

from src.erc20_bridge.bridge import TokenBridge
from src.erc20_bridge.config import BridgeConfig
from src.erc20_bridge.exceptions import BridgeError, NetworkMismatch
from src.erc20_bridge.models import Chain, Direction


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ERC-20 bridge client - register and bridge tokens between backing and mapping chains",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  SOURCE_RPC_URL        - RPC endpoint for the source chain
  BACKING_ADDRESS       - Backing contract on the source chain
  DESTINATION_RPC_URL   - RPC endpoint for the destination chain
  MAPPING_ADDRESS       - Mapping token factory on the destination chain
  DVM_NETWORK_ID        - Chain id of the destination network
  INDEXER_API_URL       - Base URL of the bridge indexer
  INDEXER_MAX_ATTEMPTS  - Optional poll limit (default: poll until indexed)
  PRIVATE_KEY           - Key used to submit transactions
  BRIDGE_CONFIG         - Chain-keyed JSON config file (replaces the variables above)
  LOG_LEVEL             - Logging level (can be overridden with --log-level)
        """
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    parser.add_argument("--config", help="Chain-keyed JSON configuration file")
    parser.add_argument("--chain", default="pangolin", help="Entry of --config to use (default: pangolin)")

    commands = parser.add_subparsers(dest="command", required=True)

    tokens = commands.add_parser("tokens", help="List bridge tokens")
    tokens.add_argument("network", choices=[c.value for c in Chain])
    tokens.add_argument("--account", help="Account to read balances for (default: active account)")

    status = commands.add_parser("status", help="Show the registration status of a token")
    status.add_argument("address")

    register = commands.add_parser("register", help="Register a token and wait for its proof")
    register.add_argument("address")
    register.add_argument(
        "--confirm",
        action="store_true",
        default=False,
        help="Submit crossChainSync once the proof is delivered"
    )

    send = commands.add_parser("send", help="Send tokens across the bridge")
    send.add_argument("direction", choices=[d.value for d in Direction])
    send.add_argument("token")
    send.add_argument("recipient")
    send.add_argument("amount", type=int, help="Amount in the token's smallest unit")

    return parser


async def run_command(bridge: TokenBridge, args: argparse.Namespace) -> None:
    match args.command:
        case "tokens":
            account = args.account or await bridge.gateway.active_account()
            tokens = await bridge.catalog.list_tokens(Chain(args.network), account)
            print(json.dumps([token.to_dict() for token in tokens], indent=2))

        case "status":
            status = await bridge.registrar.status(args.address)
            print(status.name if status is not None else "INVALID_ADDRESS")

        case "register":
            subscription = await bridge.registrar.register(args.address)
            if subscription is None:
                print("Token is already registered")
                return

            logger.info("Waiting for the registration to be indexed...")
            proof = await subscription.wait()
            print(json.dumps({"block_hash": proof.block_hash, "at": proof.at, "proof": list(proof.proof)}, indent=2))

            if args.confirm:
                tx_hash = await bridge.registrar.confirm_register(proof)
                print(f"crossChainSync submitted: {tx_hash}")

        case "send":
            tx_hash = await bridge.registrar.cross_send(
                Direction(args.direction), args.token, args.recipient, args.amount
            )
            print(f"Transfer submitted: {tx_hash}")


async def main() -> None:
    """Main entry point for the bridge client.

    Raises:
        SystemExit: On configuration or runtime errors
    """
    load_dotenv()
    args: argparse.Namespace = build_parser().parse_args()

    setup_logging(args.log_level)

    try:
        if args.config:
            config = BridgeConfig.from_file(args.config, args.chain)
        else:
            config = BridgeConfig.from_env()
        config.log_config()

        async with TokenBridge(config) as bridge:
            await run_command(bridge, args)

    except NetworkMismatch as e:
        logger.error(f"Network Error: {e}")
        sys.exit(2)

    except BridgeError as e:
        logger.error(f"Bridge Error: {e}")
        sys.exit(1)

    except ValueError as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check your environment variables:")
        logger.error("  - SOURCE_RPC_URL / BACKING_ADDRESS: source chain and backing contract")
        logger.error("  - DESTINATION_RPC_URL / MAPPING_ADDRESS: destination chain and mapping contract")
        logger.error("  - DVM_NETWORK_ID: destination network chain id")
        logger.error("  - INDEXER_API_URL: bridge indexer base URL")
        sys.exit(1)

    except KeyboardInterrupt:
        logger.info("\nReceived interrupt signal, shutting down...")
        sys.exit(0)

    except Exception as e:
        logger.error(f"Fatal Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
