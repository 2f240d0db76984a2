#!/usr/bin/env python3
"""
Run an offline demo of two-phase batch signing.

Demonstrates:
1. Building a conversion signed with a local key
2. Building a transfer whose input is signed by an external device
3. Partial signing, supplying the external signature, finalizing
4. Reconstructing the batch from its ledger entry and verifying it
"""

import argparse
import json
from datetime import datetime

from fatbatch.core.batch import TransactionBatch
from fatbatch.crypto.signer import sign
from fatbatch.keys.factoid import get_codec, seed_to_private_address
from fatbatch.keys.interface import KeyPair
from fatbatch.tx.batch_builder import TransactionBatchBuilder
from fatbatch.tx.builder import TransactionBuilder


class DemoRunner:
    """Runs the signing demonstration."""

    def __init__(self, chain_id: str = None):
        self.codec = get_codec()
        self.chain_id = chain_id
        self.results = {
            "timestamp": datetime.now().isoformat(),
            "steps": [],
        }

        # Local wallet key and a key standing in for a hardware wallet
        self.local_key = KeyPair.generate()
        self.device_key = KeyPair.generate()
        self.local_private = seed_to_private_address(self.local_key.seed)
        self.device_address = self.codec.public_key_to_address(self.device_key.public_key)
        self.destination = self.codec.public_key_to_address(KeyPair.generate().public_key)

    def run(self) -> dict:
        print("\n" + "=" * 70)
        print("FAT-2 BATCH SIGNING DEMO")
        print("=" * 70)

        builder = self.step_build_transactions()
        batch = self.step_partial_sign(builder)
        batch = self.step_external_sign(builder, batch)
        self.step_verify(batch)

        print("\n" + "=" * 70)
        print("DEMO COMPLETE")
        print("=" * 70)
        return self.results

    def step_build_transactions(self) -> TransactionBatchBuilder:
        print("\n" + "-" * 70)
        print("STEP 1: Building transactions")
        print("-" * 70)

        conversion = (
            TransactionBuilder()
            .set_input("pFCT", self.local_private, 150)
            .set_conversion("PEG")
            .build()
        )
        transfer = (
            TransactionBuilder()
            .set_input("pFCT", self.device_address, 150)
            .add_transfer(self.destination, 150)
            .set_metadata({"memo": "demo"})
            .build()
        )

        print(f"   Conversion: {conversion}")
        print(f"   Transfer:   {transfer}")

        builder = TransactionBatchBuilder(chain_id=self.chain_id)
        builder.add_transaction(conversion).add_transaction(transfer)
        self.results["steps"].append({"step": "build_transactions", "size": builder.size})
        return builder

    def step_partial_sign(self, builder: TransactionBatchBuilder) -> TransactionBatch:
        print("\n" + "-" * 70)
        print("STEP 2: First build (local signing)")
        print("-" * 70)

        batch = builder.build()
        print(f"   Status:  {batch.status.value}")
        print(f"   Pending: {list(batch.pending_indices)}")
        self.results["steps"].append({"step": "partial_sign", "status": batch.status.value})
        return batch

    def step_external_sign(
        self,
        builder: TransactionBatchBuilder,
        batch: TransactionBatch,
    ) -> TransactionBatch:
        print("\n" + "-" * 70)
        print("STEP 3: External signature")
        print("-" * 70)

        for index, address in batch.pending_inputs().items():
            data = batch.marshal_data(index)
            print(f"   Device signs index {index} ({len(data)} bytes of marshal data)")
            signature = sign(self.device_key, data)
            builder.supply_external_signature(address, self.device_key.public_key, signature)

        batch = builder.build()
        print(f"   Status: {batch.status.value}")
        self.results["steps"].append({"step": "external_sign", "status": batch.status.value})
        return batch

    def step_verify(self, batch: TransactionBatch) -> None:
        print("\n" + "-" * 70)
        print("STEP 4: Ledger entry and audit")
        print("-" * 70)

        entry = batch.ledger_entry()
        print(json.dumps(entry.to_dict(), indent=2))

        valid = TransactionBatch.from_entry(entry).verify_signatures()
        print(f"   Signatures valid: {valid}")
        self.results["steps"].append({"step": "verify", "valid": valid})


def main():
    parser = argparse.ArgumentParser(description="Run the FAT-2 batch signing demo")
    parser.add_argument(
        "--chain-id",
        help="Token chain id (default: configured chain)",
    )
    parser.add_argument(
        "--output",
        help="Write the demo results to this JSON file",
    )
    args = parser.parse_args()

    results = DemoRunner(chain_id=args.chain_id).run()

    if args.output:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
