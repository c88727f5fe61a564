# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Ed25519 keys and signatures used to sign token transactions.

Only single-key Ed25519 is supported. Private keys may be given as plain hex
(with or without ``0x``) or in the AIP-80 form ``ed25519-priv-0x...``.

Examples:
    Sign and verify::

        private_key = PrivateKey.random()
        signature = private_key.sign(b"message")
        assert private_key.public_key().verify(b"message", signature)
"""

from __future__ import annotations

import unittest

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

AIP80_PREFIX = "ed25519-priv-"


class PrivateKey:
    LENGTH: int = 32

    key: SigningKey

    def __init__(self, key: SigningKey):
        self.key = key

    def __eq__(self, other: object):
        if not isinstance(other, PrivateKey):
            return NotImplemented
        return self.key == other.key

    def __str__(self):
        return self.aip80()

    @staticmethod
    def from_str(value: str, strict: bool | None = None) -> PrivateKey:
        """Parse a private key from plain hex or its AIP-80 form.

        Args:
            value: ``"0x..."``, ``"..."`` or ``"ed25519-priv-0x..."``.
            strict: If True the value must be AIP-80 formatted. If False or None
                both forms are accepted.

        Raises:
            ValueError: If the value is not a 32-byte hex key, or strict parsing
                was requested for a non AIP-80 value.
        """
        if value.startswith(AIP80_PREFIX):
            value = value[len(AIP80_PREFIX) :]
        elif strict:
            raise ValueError("Private key is not AIP-80 compliant")

        key = bytes.fromhex(value.removeprefix("0x"))
        if len(key) != PrivateKey.LENGTH:
            raise ValueError(f"Expected a {PrivateKey.LENGTH} byte private key")
        return PrivateKey(SigningKey(key))

    def hex(self) -> str:
        return f"0x{self.key.encode().hex()}"

    def aip80(self) -> str:
        return f"{AIP80_PREFIX}{self.hex()}"

    def public_key(self) -> PublicKey:
        return PublicKey(self.key.verify_key)

    @staticmethod
    def random() -> PrivateKey:
        return PrivateKey(SigningKey.generate())

    def sign(self, data: bytes) -> Signature:
        return Signature(self.key.sign(data).signature)


class PublicKey:
    LENGTH: int = 32

    key: VerifyKey

    def __init__(self, key: VerifyKey):
        self.key = key

    def __eq__(self, other: object):
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.key == other.key

    def __str__(self) -> str:
        return f"0x{self.key.encode().hex()}"

    @staticmethod
    def from_str(value: str) -> PublicKey:
        return PublicKey(VerifyKey(bytes.fromhex(value.removeprefix("0x"))))

    def verify(self, data: bytes, signature: Signature) -> bool:
        """Returns False rather than raising when the signature does not match."""
        try:
            self.key.verify(data, signature.data())
        except BadSignatureError:
            return False
        return True

    def to_crypto_bytes(self) -> bytes:
        return self.key.encode()


class Signature:
    LENGTH: int = 64

    signature: bytes

    def __init__(self, signature: bytes):
        self.signature = signature

    def __eq__(self, other: object):
        if not isinstance(other, Signature):
            return NotImplemented
        return self.signature == other.signature

    def __str__(self) -> str:
        return f"0x{self.signature.hex()}"

    def data(self) -> bytes:
        return self.signature


class Test(unittest.TestCase):
    def test_private_key_from_str(self):
        plain = PrivateKey.from_str(
            "0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"
        )
        unprefixed = PrivateKey.from_str(
            "4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"
        )
        aip80 = PrivateKey.from_str(
            "ed25519-priv-0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe",
            True,
        )
        self.assertEqual(plain, unprefixed)
        self.assertEqual(plain, aip80)
        self.assertEqual(
            str(plain),
            "ed25519-priv-0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe",
        )

    def test_strict_parsing(self):
        with self.assertRaises(ValueError):
            PrivateKey.from_str("0x" + "11" * 32, True)
        with self.assertRaises(ValueError):
            PrivateKey.from_str("0x1234")

    def test_sign_and_verify(self):
        private_key = PrivateKey.random()
        public_key = private_key.public_key()

        signature = private_key.sign(b"test_message")
        self.assertTrue(public_key.verify(b"test_message", signature))
        self.assertFalse(public_key.verify(b"other_message", signature))
        self.assertEqual(PublicKey.from_str(str(public_key)), public_key)


if __name__ == "__main__":
    unittest.main()
