#!/usr/bin/env python3
"""
Generate an RSA signing key pair for PRIVATE_KEY / PUBLIC_KEY.

Both values are base64-encoded PEM, ready for an env file or secret manager.
Prints values to stdout; do NOT commit the output.
"""

from __future__ import annotations

import argparse
import base64

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def generate_pem_pair(bits: int = 2048) -> tuple[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=bits)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem.decode("ascii"), public_pem.decode("ascii")


def b64(pem: str) -> str:
    return base64.b64encode(pem.encode("ascii")).decode("ascii")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--bits", type=int, default=2048)
    args = parser.parse_args()

    private_pem, public_pem = generate_pem_pair(args.bits)
    print("# Paste these into your secret manager / env file")
    print(f"PRIVATE_KEY={b64(private_pem)}")
    print(f"PUBLIC_KEY={b64(public_pem)}")


if __name__ == "__main__":
    main()
