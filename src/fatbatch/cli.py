"""
Command-line interface for fatbatch.

Provides commands for deriving addresses, building batches from a JSON
description and verifying ledger entries.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog

from fatbatch import __version__
from fatbatch.config import get_config
from fatbatch.core.batch import TransactionBatch
from fatbatch.core.entry import LedgerEntry
from fatbatch.core.errors import FatError, ValidationError
from fatbatch.keys.factoid import get_codec
from fatbatch.tx.batch_builder import TransactionBatchBuilder
from fatbatch.tx.builder import TransactionBuilder


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    import logging
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fatbatch",
        description="Build and sign FAT-2 transaction batches",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: FAT_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        default=None,
        help="Output logs in JSON format (default: FAT_LOG_JSON)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Address command
    address_parser = subparsers.add_parser(
        "address", help="Print the public address of a private address"
    )
    address_parser.add_argument("private_address", help="Private Factoid address (Fs...)")

    # Build command
    build_parser = subparsers.add_parser("build", help="Build a batch from a JSON file")
    build_parser.add_argument(
        "--file",
        required=True,
        help="JSON list of transactions to batch",
    )
    build_parser.add_argument(
        "--chain-id",
        help="Token chain id (default: FAT_TOKEN_CHAIN_ID or the PegNet chain)",
    )

    # Verify command
    verify_parser = subparsers.add_parser("verify", help="Verify the signatures of a ledger entry")
    verify_parser.add_argument(
        "--file",
        required=True,
        help="Ledger entry JSON (as printed by build)",
    )

    return parser


def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ValidationError(f"Cannot read {path}: {e.strerror or e}")
    except ValueError as e:
        raise ValidationError(f"{path} is not valid JSON: {e}")


def transaction_from_description(description: Dict[str, Any]):
    """
    Build a transaction from its JSON description.

    The description holds ``type``, ``input``, ``amount`` and either
    ``conversion`` or ``transfers`` (list of ``{address, amount}``), plus
    optional ``metadata``.
    """
    if not isinstance(description, dict):
        raise ValidationError("Each transaction must be a JSON object")

    builder = TransactionBuilder().set_input(
        description.get("type"), description.get("input"), description.get("amount")
    )
    if "conversion" in description:
        builder.set_conversion(description["conversion"])
    for transfer in description.get("transfers") or []:
        if not isinstance(transfer, dict):
            raise ValidationError("Each transfer must be a JSON object")
        builder.add_transfer(transfer.get("address"), transfer.get("amount"))
    if "metadata" in description:
        builder.set_metadata(description["metadata"])
    return builder.build()


def build_batch(args: argparse.Namespace) -> int:
    """Build a batch and print the ledger entry or the pending signing data."""
    descriptions = _read_json(args.file)
    if not isinstance(descriptions, list):
        raise ValidationError("Batch file must contain a JSON list of transactions")

    builder = TransactionBatchBuilder(chain_id=args.chain_id)
    for description in descriptions:
        builder.add_transaction(transaction_from_description(description))

    batch = builder.build()

    if batch.is_finalized:
        print(json.dumps(batch.ledger_entry().to_dict(), indent=2, ensure_ascii=False))
        return 0

    pending: List[Dict[str, Any]] = [
        {
            "index": index,
            "input": address,
            "marshal_data": batch.marshal_data(index).hex(),
        }
        for index, address in batch.pending_inputs().items()
    ]
    output = batch.to_dict()
    output["pending"] = pending
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


def verify_entry(args: argparse.Namespace) -> int:
    """Reconstruct a batch from a ledger entry and check its signatures."""
    entry = LedgerEntry.from_dict(_read_json(args.file))
    batch = TransactionBatch.from_entry(entry)
    valid = batch.verify_signatures()

    print(json.dumps({
        "valid": valid,
        "chain_id": batch.chain_id_hex,
        "size": batch.size,
        "timestamp": batch.timestamp,
    }, indent=2))
    return 0 if valid else 1


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = get_config()
    setup_logging(
        args.log_level or config.log_level,
        config.log_json if args.log_json is None else args.log_json,
    )

    try:
        if args.command == "address":
            print(get_codec().public_address(args.private_address))
            status = 0
        elif args.command == "build":
            status = build_batch(args)
        else:
            status = verify_entry(args)
    except FatError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(status)


if __name__ == "__main__":
    main()
