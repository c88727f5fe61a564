# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import os
import tempfile
import unittest

from . import ed25519
from .account_address import AccountAddress


class Account:
    """An Aptos account: an address together with the Ed25519 key that controls it.

    The account is the signing capability handed to the token client. The
    client never touches the private key directly; it only asks the account to
    sign the signing message the node produced for a transaction.

    Examples:
        Create, persist and reload an account::

            account = Account.generate()
            account.store("./alice.json")
            alice = Account.load("./alice.json")
            assert alice == account
    """

    account_address: AccountAddress
    private_key: ed25519.PrivateKey

    def __init__(
        self, account_address: AccountAddress, private_key: ed25519.PrivateKey
    ):
        self.account_address = account_address
        self.private_key = private_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Account):
            return NotImplemented
        return (
            self.account_address == other.account_address
            and self.private_key == other.private_key
        )

    @staticmethod
    def generate() -> Account:
        private_key = ed25519.PrivateKey.random()
        account_address = AccountAddress.from_key(private_key.public_key())
        return Account(account_address, private_key)

    @staticmethod
    def load_key(key: str) -> Account:
        """Create an account from a hex or AIP-80 encoded Ed25519 private key."""
        private_key = ed25519.PrivateKey.from_str(key)
        account_address = AccountAddress.from_key(private_key.public_key())
        return Account(account_address, private_key)

    @staticmethod
    def load(path: str) -> Account:
        """Load an account stored by :meth:`store`.

        The file holds ``{"account_address": "0x...", "private_key": "..."}``.
        The address is read as is, so accounts whose key was rotated keep
        their original address.
        """
        with open(path) as file:
            data = json.load(file)
        return Account(
            AccountAddress.from_str_relaxed(data["account_address"]),
            ed25519.PrivateKey.from_str(data["private_key"]),
        )

    def store(self, path: str):
        data = {
            "account_address": str(self.account_address),
            "private_key": str(self.private_key),
        }
        with open(path, "w") as file:
            json.dump(data, file)

    def address(self) -> AccountAddress:
        return self.account_address

    def auth_key(self) -> str:
        """The authentication key derived from the current public key."""
        return str(AccountAddress.from_key(self.private_key.public_key()))

    def sign(self, data: bytes) -> ed25519.Signature:
        return self.private_key.sign(data)

    def public_key(self) -> ed25519.PublicKey:
        return self.private_key.public_key()


class Test(unittest.TestCase):
    def test_load_and_store(self):
        (file, path) = tempfile.mkstemp()
        os.close(file)
        start = Account.generate()
        start.store(path)
        load = Account.load(path)
        os.remove(path)

        self.assertEqual(start, load)
        # Auth key and account address are the same until the key is rotated
        self.assertEqual(str(start.address()), start.auth_key())

    def test_key(self):
        message = b"test message"
        account = Account.generate()
        signature = account.sign(message)
        self.assertTrue(account.public_key().verify(message, signature))

    def test_load_key(self):
        account = Account.load_key(
            "0x4e5e3be60f4bbd5e98d086d932f3ce779ff4b58da99bf9e5241ae1212a29e5fe"
        )
        self.assertEqual(
            account.address(), AccountAddress.from_key(account.public_key())
        )


if __name__ == "__main__":
    unittest.main()
