"""
Generate the RSA key pair used to sign vote tokens.

Regenerating the keys invalidates every token issued with the previous
private key, so existing keys are only replaced after confirmation or
with --force.

Run with: python -m scripts.generate_keys [--force]
"""

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import settings
from core.keystore import CryptoProviderError, KeyStore, generate_key_pair, get_key_store


def confirm_overwrite(input_func: Callable[[str], str] = input) -> bool:
    """Ask the operator whether existing keys may be replaced."""
    try:
        answer = input_func(
            "Overwrite them? This will invalidate every token issued so far. [y/N] "
        )
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def generate_keys(
    key_store: KeyStore,
    force: bool = False,
    key_size: int = 2048,
    input_func: Callable[[str], str] = input,
) -> int:
    """Generate and store a key pair. Returns a process exit code."""
    print("Generating server keys for vote tokens...")

    if key_store.keys_exist() and not force:
        print("Keys already exist.")
        if not confirm_overwrite(input_func):
            print("Operation cancelled.")
            return 0

    try:
        print(f"Generating RSA {key_size}-bit key pair...")
        pair = generate_key_pair(key_size=key_size)

        print(f"Storing keys in {key_store.private_key_path.parent}/ ...")
        key_store.store_key_pair(pair)
    except (CryptoProviderError, OSError) as e:
        print(f"Error generating keys: {e}", file=sys.stderr)
        return 1

    print()
    print("Keys generated successfully!")
    print(f"Private key: {key_store.private_key_path} (mode 600)")
    print(f"Public key:  {key_store.public_key_path} (mode 644)")
    print()
    print("IMPORTANT:")
    print("  - Keep the private key secret and never share it")
    print("  - Back up the keys before deploying to production")
    print("  - If the keys are lost, every existing token becomes unverifiable")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate the vote token signing keys")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing keys without asking",
    )
    args = parser.parse_args(argv)

    return generate_keys(get_key_store(), force=args.force, key_size=settings.RSA_KEY_SIZE)


if __name__ == "__main__":
    sys.exit(main())
