# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Account addresses for the Aptos blockchain.

Addresses are 32-byte identifiers. They are formatted according to AIP-40:
special addresses (0x0 through 0xf) use the SHORT form ``0x1`` and every other
address uses the LONG form, ``0x`` followed by 64 hex characters.

Token operations accept addresses either as ``AccountAddress`` instances or as
hex strings; :meth:`AccountAddress.normalize` turns both into an
``AccountAddress`` so that payloads and table keys always carry the canonical
string form.

Examples:
    Parsing and formatting::

        addr = AccountAddress.from_str("0x3")
        str(addr)  # "0x3"

        addr = AccountAddress.from_str_relaxed("b0b")
        str(addr)  # "0x0000...0b0b"
"""

from __future__ import annotations

import hashlib
import unittest

from . import ed25519


class AuthKeyScheme:
    """Suffixes appended to key material before hashing it into an address."""

    Ed25519: bytes = b"\x00"


class ParseAddressError(Exception):
    """Raised when a string or byte sequence is not a valid account address."""


class AccountAddress:
    address: bytes
    LENGTH: int = 32

    def __init__(self, address: bytes):
        self.address = address

        if len(address) != AccountAddress.LENGTH:
            raise ParseAddressError("Expected address of length 32")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccountAddress):
            return NotImplemented
        return self.address == other.address

    def __hash__(self) -> int:
        return hash(self.address)

    def __str__(self):
        """AIP-40 representation: SHORT form for special addresses, LONG otherwise."""
        suffix = self.address.hex()
        if self.is_special():
            suffix = suffix.lstrip("0") or "0"
        return f"0x{suffix}"

    def __repr__(self):
        return self.__str__()

    def is_special(self):
        """True for 0x0 through 0xf, the only addresses allowed in SHORT form."""
        return all(b == 0 for b in self.address[:-1]) and self.address[-1] < 0b10000

    @staticmethod
    def from_str(address: str) -> AccountAddress:
        """Strict AIP-40 parsing.

        Requires a leading ``0x``. Non-special addresses must be in LONG form and
        special addresses must be either LONG form or exactly ``0x0``-``0xf``.

        Raises:
            ParseAddressError: If the string does not meet the above.
        """
        if not address.startswith("0x"):
            raise ParseAddressError("Hex string must start with a leading 0x.")

        out = AccountAddress.from_str_relaxed(address)

        if len(address) != AccountAddress.LENGTH * 2 + 2:
            if not out.is_special():
                raise ParseAddressError(
                    "The given hex string is not a special address, it must be "
                    "represented as 0x + 64 chars."
                )
            # 0x + one hex char is the only valid SHORT form.
            if len(address) != 3:
                raise ParseAddressError(
                    "The given hex string is a special address not in LONG form, "
                    "it must be 0x0 to 0xf without padding zeroes."
                )

        return out

    @staticmethod
    def from_str_relaxed(address: str) -> AccountAddress:
        """Lenient parsing: optional ``0x`` and 1 to 64 hex characters, left padded.

        Raises:
            ParseAddressError: If the string is empty, too long or not hex.
        """
        addr = address.removeprefix("0x")

        if len(addr) < 1:
            raise ParseAddressError(
                "Hex string is too short, must be 1 to 64 chars long, excluding the "
                "leading 0x."
            )
        if len(addr) > AccountAddress.LENGTH * 2:
            raise ParseAddressError(
                "Hex string is too long, must be 1 to 64 chars long, excluding the "
                "leading 0x."
            )

        addr = addr.rjust(AccountAddress.LENGTH * 2, "0")
        try:
            return AccountAddress(bytes.fromhex(addr))
        except ValueError as e:
            raise ParseAddressError(f"Invalid hex string: {address}") from e

    @staticmethod
    def normalize(address: AccountAddress | str) -> AccountAddress:
        """Return an ``AccountAddress`` for either an instance or a hex string.

        Strings are parsed leniently since node responses and user input
        commonly carry addresses with the leading zeroes trimmed.
        """
        if isinstance(address, AccountAddress):
            return address
        return AccountAddress.from_str_relaxed(address)

    @staticmethod
    def from_key(key: ed25519.PublicKey) -> AccountAddress:
        """Derive the address of a fresh account: sha3-256(public key || scheme)."""
        hasher = hashlib.sha3_256()
        hasher.update(key.to_crypto_bytes())
        hasher.update(AuthKeyScheme.Ed25519)
        return AccountAddress(hasher.digest())


class Test(unittest.TestCase):
    def test_from_key(self):
        private_key = ed25519.PrivateKey.from_str(
            "0x0000000000000000000000000000000000000000000000000000000000000001"
        )
        address = AccountAddress.from_key(private_key.public_key())
        hasher = hashlib.sha3_256()
        hasher.update(private_key.public_key().to_crypto_bytes() + b"\x00")
        self.assertEqual(address.address, hasher.digest())

    def test_to_standard_string(self):
        self.assertEqual(str(AccountAddress.from_str_relaxed("0x" + "0" * 64)), "0x0")
        special_f = AccountAddress.from_str_relaxed("0x" + "0" * 63 + "f")
        self.assertEqual(str(special_f), "0xf")
        self.assertEqual(str(AccountAddress.from_str_relaxed("d")), "0xd")

        # Neither leading nor trailing zeroes are trimmed for non-special addresses.
        value = "0x0000000000000000000000000000000000000000000000000000000000000010"
        self.assertEqual(str(AccountAddress.from_str_relaxed(value)), value)
        value = "0f00000000000000000000000000000000000000000000000000000000000000"
        self.assertEqual(str(AccountAddress.from_str_relaxed(value)), f"0x{value}")

    def test_from_str(self):
        self.assertEqual(str(AccountAddress.from_str("0x3")), "0x3")
        long_form = AccountAddress.from_str("0x" + "0" * 63 + "3")
        self.assertEqual(long_form, AccountAddress.from_str("0x3"))
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str("3")
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str("0x03")
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str("0x10")

    def test_from_str_relaxed_errors(self):
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str_relaxed("0x")
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str_relaxed("1" * 65)
        with self.assertRaises(ParseAddressError):
            AccountAddress.from_str_relaxed("0xzz")

    def test_normalize(self):
        address = AccountAddress.from_str_relaxed("b0b")
        self.assertIs(AccountAddress.normalize(address), address)
        self.assertEqual(AccountAddress.normalize("0xb0b"), address)
        self.assertEqual(AccountAddress.normalize(str(address)), address)


if __name__ == "__main__":
    unittest.main()
