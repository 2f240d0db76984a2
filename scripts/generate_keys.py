#!/usr/bin/env python3
"""
Generate Factoid keys for signing FAT-2 transactions.

This script generates:
- A private Factoid address (Fs...) holding a fresh Ed25519 seed
- The matching public Factoid address (FA...)
- Optionally an sk1 identity key for signing token issuances
"""

import argparse
import json
from pathlib import Path

from fatbatch.keys.factoid import get_codec, seed_to_private_address, seed_to_sk1
from fatbatch.keys.interface import KeyPair


def generate_keys(output_dir: str = "./keys", with_sk1: bool = False) -> dict:
    """
    Generate a new key pair.

    Args:
        output_dir: Directory to save keys
        with_sk1: Also generate an identity key

    Returns:
        Dictionary with key info and addresses
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    key_pair = KeyPair.generate()
    codec = get_codec()

    info = {
        "private_address": seed_to_private_address(key_pair.seed),
        "public_address": codec.public_key_to_address(key_pair.public_key),
        "public_key": key_pair.public_key.hex(),
    }
    if with_sk1:
        info["sk1"] = seed_to_sk1(KeyPair.generate().seed)

    info_path = output_path / "key_info.json"
    with open(info_path, "w") as f:
        json.dump(info, f, indent=2)

    return info


def main():
    parser = argparse.ArgumentParser(description="Generate Factoid keys")
    parser.add_argument(
        "--output-dir", "-o",
        default="./keys",
        help="Output directory for keys (default: ./keys)"
    )
    parser.add_argument(
        "--sk1",
        action="store_true",
        help="Also generate an sk1 identity key"
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Overwrite existing keys"
    )

    args = parser.parse_args()

    info_path = Path(args.output_dir) / "key_info.json"

    if info_path.exists() and not args.force:
        print(f"Keys already exist at {args.output_dir}")
        print("   Use --force to overwrite")

        with open(info_path) as f:
            info = json.load(f)
        print(f"\nExisting public address: {info['public_address']}")
        return

    print("Generating new Factoid keys...")
    info = generate_keys(args.output_dir, with_sk1=args.sk1)

    print(f"\nKeys saved to: {info_path} (KEEP SECRET!)")
    print(f"\n   Public address: {info['public_address']}")
    print(f"   Public key:     {info['public_key']}")


if __name__ == "__main__":
    main()
