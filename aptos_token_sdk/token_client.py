# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Client for collections and tokens of the Aptos token standard (``0x3::token``).

Write operations build a script function payload and drive it through the
sign, submit and confirm pipeline, returning the hash of the committed
transaction. Read operations fetch a registry resource from an account and
read one item from the table it references, returning a typed value.

Tokens move between accounts with an offer and a claim: the owner offers an
amount to a receiver, who then claims it. Until claimed, the owner can cancel
the offer, after which a claim fails with :class:`ResourceNotFound`.

The client targets the legacy JSON REST API that a node serves at its root,
see :mod:`aptos_token_sdk.async_client`.

Examples:
    Create a collection and a token, then read the token back::

        from aptos_token_sdk.account import Account
        from aptos_token_sdk.async_client import RestClient
        from aptos_token_sdk.token_client import TokenClient

        rest_client = RestClient("http://127.0.0.1:8080")
        token_client = TokenClient(rest_client)
        alice = Account.load("./alice.json")

        await token_client.create_collection(
            alice, "Alice's", "Alice's simple collection", "https://aptos.dev"
        )
        await token_client.create_token(
            alice, "Alice's", "Alice's first token", "Alice's simple token", 1,
            "https://aptos.dev/img/nyan.jpeg",
        )
        token_data = await token_client.get_token_data(
            alice.address(), "Alice's", "Alice's first token"
        )

    Move the token to Bob::

        await token_client.offer_token(
            alice, bob.address(), alice.address(), "Alice's",
            "Alice's first token", 1,
        )
        await token_client.claim_token(
            bob, alice.address(), alice.address(), "Alice's",
            "Alice's first token",
        )
        token = await token_client.get_token_balance_for_account(
            bob.address(),
            TokenId(TokenDataId(alice.address(), "Alice's", "Alice's first token")),
        )
"""

from __future__ import annotations

import inspect
import logging
import unittest
import unittest.mock
from typing import Any, Dict, Optional

import httpx

from . import payloads
from .account import Account
from .account_address import AccountAddress
from .async_client import (
    ResourceNotFound,
    RestClient,
    TableItemNotFound,
    TransactionFailed,
)
from .encoding import encode_str
from .payloads import (
    CollectionMutabilitySettings,
    PropertyLengthMismatch,
    TokenOptions,
)
from .resources import COLLECTIONS, STRING, TOKEN_STORE, ResourceResolver
from .token_types import (
    NUMBER_MAX,
    CollectionData,
    Token,
    TokenData,
    TokenDataId,
    TokenId,
)
from .transactions import MAX_GAS_AMOUNT, ScriptFunctionPayload, submit_transaction

PENDING_CLAIMS = "0x3::token_transfers::PendingClaims"

# vm_status fragments of a claim aborted for lack of a pending offer
OFFER_NOT_FOUND_STATUSES = ["ETOKEN_OFFER_NOT_EXIST", "MISSING_DATA"]


class TokenClient:
    """Issues, transfers and queries tokens through a RestClient."""

    _client: RestClient
    _resolver: ResourceResolver
    max_gas_amount: int

    def __init__(self, client: RestClient, max_gas_amount: int = MAX_GAS_AMOUNT):
        self._client = client
        self._resolver = ResourceResolver(client)
        self.max_gas_amount = max_gas_amount

    async def _submit(self, signer: Account, payload: ScriptFunctionPayload) -> str:
        return await submit_transaction(
            self._client, signer, payload, self.max_gas_amount
        )

    #
    # Writes
    #

    async def create_collection(
        self,
        account: Account,
        name: str,
        description: str,
        uri: str,
        maximum: Optional[int] = None,
        mutability: Optional[CollectionMutabilitySettings] = None,
    ) -> str:
        """
        Create a collection owned by account.

        Args:
            maximum: Cap on the number of token types, unbounded when omitted.
            mutability: Which collection fields stay mutable, none when omitted.

        Returns:
            Hash of the committed transaction.
        """
        payload = payloads.create_collection_payload(
            name, description, uri, maximum, mutability
        )
        return await self._submit(account, payload)

    async def create_token(
        self,
        account: Account,
        collection_name: str,
        name: str,
        description: str,
        supply: int,
        uri: str,
        maximum: Optional[int] = None,
        options: Optional[TokenOptions] = None,
    ) -> str:
        """
        Create a token type in one of account's collections and mint its supply
        to account.

        Royalties go to account unless options names another payee.

        Returns:
            Hash of the committed transaction.

        Raises:
            PropertyLengthMismatch: If the property lists in options differ in
                length. Nothing is submitted in that case.
        """
        payload = payloads.create_token_payload(
            account.address(),
            collection_name,
            name,
            description,
            supply,
            uri,
            maximum,
            options,
        )
        return await self._submit(account, payload)

    async def offer_token(
        self,
        account: Account,
        receiver: AccountAddress | str,
        creator: AccountAddress | str,
        collection_name: str,
        token_name: str,
        amount: int,
        property_version: int = 0,
    ) -> str:
        """Offer amount of a token held by account to receiver."""
        payload = payloads.offer_token_payload(
            receiver, creator, collection_name, token_name, amount, property_version
        )
        return await self._submit(account, payload)

    async def claim_token(
        self,
        account: Account,
        sender: AccountAddress | str,
        creator: AccountAddress | str,
        collection_name: str,
        token_name: str,
        property_version: int = 0,
    ) -> str:
        """
        Claim a token that sender offered to account.

        Raises:
            ResourceNotFound: If sender has no pending offer of the token to
                account, e.g. because it was cancelled.
            TransactionFailed: If the claim failed for any other reason.
        """
        payload = payloads.claim_token_payload(
            sender, creator, collection_name, token_name, property_version
        )
        try:
            return await self._submit(account, payload)
        except TransactionFailed as e:
            if not any(status in e.vm_status for status in OFFER_NOT_FOUND_STATUSES):
                raise
            logging.info(f"no pending offer from {sender} to {account.address()}")
            raise ResourceNotFound(
                f"no pending offer from {sender}: {e.vm_status}", PENDING_CLAIMS
            ) from e

    async def cancel_token_offer(
        self,
        account: Account,
        receiver: AccountAddress | str,
        creator: AccountAddress | str,
        collection_name: str,
        token_name: str,
        property_version: int = 0,
    ) -> str:
        """Withdraw a pending offer that account made to receiver."""
        payload = payloads.cancel_token_offer_payload(
            receiver, creator, collection_name, token_name, property_version
        )
        return await self._submit(account, payload)

    #
    # Reads
    #

    async def get_collection_data(
        self, creator: AccountAddress | str, collection_name: str
    ) -> CollectionData:
        """
        Read a collection from its creator's collection table.

        Raises:
            AccountNotFound: If the creator does not exist.
            ResourceNotFound: If the creator never created a collection.
            TableItemNotFound: If the creator has no such collection.
        """
        handle = await self._resolver.resolve_table_handle_from_resources(
            creator, COLLECTIONS, "collection_data"
        )
        return await self._resolver.lookup(
            handle, STRING, CollectionData.struct_tag, encode_str(collection_name)
        )

    async def get_token_data(
        self, creator: AccountAddress | str, collection_name: str, token_name: str
    ) -> TokenData:
        """
        Read a token type from its creator's token data table.

        Raises:
            ResourceNotFound: If the creator never created a collection.
            TableItemNotFound: If the token type does not exist.
        """
        creator = AccountAddress.normalize(creator)
        handle = await self._resolver.resolve_table_handle(
            creator, COLLECTIONS, "token_data"
        )
        token_data_id = TokenDataId(creator, collection_name, token_name)
        return await self._resolver.lookup(
            handle,
            TokenDataId.struct_tag,
            TokenData.struct_tag,
            token_data_id.to_json(),
        )

    async def get_token_balance(
        self,
        creator: AccountAddress | str,
        collection_name: str,
        token_name: str,
        property_version: int = 0,
    ) -> Token:
        """Read how much of a token its creator still holds."""
        creator = AccountAddress.normalize(creator)
        token_id = TokenId(
            TokenDataId(creator, collection_name, token_name), property_version
        )
        return await self.get_token_balance_for_account(creator, token_id)

    async def get_token_balance_for_account(
        self, account: AccountAddress | str, token_id: TokenId | Dict[str, Any]
    ) -> Token:
        """
        Read how much of a token an account holds.

        Args:
            account: The account whose TokenStore is read.
            token_id: A TokenId or the key form rendered by TokenId.to_json.

        Raises:
            ResourceNotFound: If the account never held a token.
            TableItemNotFound: If the account holds none of this token.
        """
        token_id = TokenId.from_json(token_id)
        handle = await self._resolver.resolve_table_handle(
            account, TOKEN_STORE, "tokens"
        )
        return await self._resolver.lookup(
            handle, TokenId.struct_tag, Token.struct_tag, token_id.to_json()
        )


class Test(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.alice = Account.generate()
        self.bob = Account.generate()
        self.client = unittest.mock.AsyncMock()
        self.client.submit_transaction.return_value = "0xabc"
        self.token_client = TokenClient(self.client)

    def submitted_payload(self) -> ScriptFunctionPayload:
        return self.client.generate_transaction.await_args.args[1]

    async def test_create_collection(self):
        txn_hash = await self.token_client.create_collection(
            self.alice, "Col", "desc", "uri"
        )
        self.assertEqual(txn_hash, "0xabc")
        self.client.generate_transaction.assert_awaited_once_with(
            self.alice.address(),
            payloads.create_collection_payload("Col", "desc", "uri"),
            MAX_GAS_AMOUNT,
        )
        self.client.wait_for_transaction.assert_awaited_once_with("0xabc")

    async def test_create_token_royalty_defaults_to_creator(self):
        await self.token_client.create_token(self.alice, "Col", "Tok", "d", 1, "uri")
        payload = self.submitted_payload()
        self.assertEqual(payload.function, "create_token_script")
        self.assertEqual(payload.arguments[6], str(self.alice.address()))
        self.assertEqual(payload.arguments[7:9], ["0", "0"])

    async def test_create_token_property_mismatch_submits_nothing(self):
        with self.assertRaises(PropertyLengthMismatch):
            await self.token_client.create_token(
                self.alice,
                "Col",
                "Tok",
                "d",
                1,
                "uri",
                options=TokenOptions(property_keys=["level"]),
            )
        self.client.generate_transaction.assert_not_awaited()

    async def test_transfers(self):
        await self.token_client.offer_token(
            self.alice, self.bob.address(), self.alice.address(), "Col", "Tok", 1
        )
        offer = self.submitted_payload()
        self.assertEqual(offer.function, "offer_script")
        self.assertEqual(offer.arguments[0], str(self.bob.address()))

        await self.token_client.claim_token(
            self.bob, self.alice.address(), self.alice.address(), "Col", "Tok"
        )
        self.assertEqual(
            self.client.generate_transaction.await_args.args[0], self.bob.address()
        )
        self.assertEqual(self.submitted_payload().function, "claim_script")

    async def test_claim_after_cancel_fails(self):
        vm_status = (
            "Move abort in 0x3::token_transfers: ETOKEN_OFFER_NOT_EXIST(0x60001): "
            "Token offer doesn't exist"
        )
        rest_client = RestClient("http://127.0.0.1:8080")
        self.addAsyncCleanup(rest_client.close)

        def get(endpoint: str, params: Optional[Dict[str, Any]] = None):
            if endpoint.startswith("accounts/"):
                body = {"sequence_number": "0", "authentication_key": ""}
                return httpx.Response(200, json=body)
            success = endpoint != "transactions/0xclaim_script"
            return httpx.Response(
                200,
                json={
                    "type": "user_transaction",
                    "success": success,
                    "vm_status": "Executed successfully" if success else vm_status,
                },
            )

        def post(endpoint: str, data: Dict[str, Any], **kwargs):
            if endpoint == "transactions/signing_message":
                return httpx.Response(200, json={"message": "0x01"})
            function = data["payload"]["function"]["name"]
            return httpx.Response(202, json={"hash": f"0x{function}"})

        token_client = TokenClient(rest_client)
        with unittest.mock.patch.object(
            rest_client, "_get", side_effect=get
        ), unittest.mock.patch.object(rest_client, "_post", side_effect=post):
            txn_hash = await token_client.cancel_token_offer(
                self.alice, self.bob.address(), self.alice.address(), "Col", "Tok"
            )
            self.assertEqual(txn_hash, "0xcancel_offer_script")

            with self.assertRaises(ResourceNotFound) as cm:
                await token_client.claim_token(
                    self.bob, self.alice.address(), self.alice.address(), "Col", "Tok"
                )
        self.assertEqual(cm.exception.resource, PENDING_CLAIMS)
        self.assertIsInstance(cm.exception.__cause__, TransactionFailed)
        self.assertEqual(cm.exception.__cause__.vm_status, vm_status)

    async def test_other_claim_failures_propagate(self):
        self.client.wait_for_transaction.side_effect = TransactionFailed(
            "out of gas", "0xabc", "OUT_OF_GAS"
        )
        with self.assertRaises(TransactionFailed):
            await self.token_client.claim_token(
                self.bob, self.alice.address(), self.alice.address(), "Col", "Tok"
            )

    def test_optional_arguments_default_to_none(self):
        for method, name in [
            (TokenClient.create_collection, "mutability"),
            (TokenClient.create_token, "options"),
        ]:
            self.assertIsNone(inspect.signature(method).parameters[name].default)

    async def test_get_collection_data(self):
        self.client.account_resources.return_value = [
            {
                "type": "0x3::token::Collections",
                "data": {
                    "collection_data": {"handle": "0x11"},
                    "token_data": {"handle": "0x12"},
                },
            }
        ]
        self.client.get_table_item.return_value = {
            "name": "Col",
            "description": "desc",
            "uri": "uri",
            "supply": "0",
            "maximum": str(NUMBER_MAX),
        }
        data = await self.token_client.get_collection_data(self.alice.address(), "Col")
        self.assertEqual(data.name, "Col")
        self.assertTrue(data.is_unbounded)
        self.client.get_table_item.assert_awaited_once_with(
            "0x11", STRING, "0x3::token::CollectionData", encode_str("Col")
        )

    async def test_get_token_data(self):
        self.client.account_resource.return_value = {
            "type": "0x3::token::Collections",
            "data": {
                "collection_data": {"handle": "0x11"},
                "token_data": {"handle": "0x12"},
            },
        }
        self.client.get_table_item.return_value = {
            "collection": "Col",
            "name": "Tok",
            "description": "d",
            "uri": "uri",
            "maximum": str(NUMBER_MAX),
            "supply": "1",
        }
        data = await self.token_client.get_token_data(
            str(self.alice.address()), "Col", "Tok"
        )
        self.assertEqual(
            (data.collection, data.name, data.supply, data.maximum),
            ("Col", "Tok", 1, NUMBER_MAX),
        )
        self.client.get_table_item.assert_awaited_once_with(
            "0x12",
            "0x3::token::TokenDataId",
            "0x3::token::TokenData",
            {
                "creator": str(self.alice.address()),
                "collection": encode_str("Col"),
                "name": encode_str("Tok"),
            },
        )

    async def test_get_token_balance_defaults_to_original_version(self):
        self.client.account_resource.return_value = {
            "type": "0x3::token::TokenStore",
            "data": {"tokens": {"handle": "0x13"}},
        }
        token_data_id = TokenDataId(self.alice.address(), "Col", "Tok")
        self.client.get_table_item.return_value = {
            "id": {
                "token_data_id": {
                    "creator": str(self.alice.address()),
                    "collection": "Col",
                    "name": "Tok",
                },
                "property_version": "0",
            },
            "amount": "1",
        }

        implicit = await self.token_client.get_token_balance(
            self.alice.address(), "Col", "Tok"
        )
        implicit_key = self.client.get_table_item.await_args.args[3]
        explicit = await self.token_client.get_token_balance(
            self.alice.address(), "Col", "Tok", property_version=0
        )
        explicit_key = self.client.get_table_item.await_args.args[3]

        self.assertEqual(implicit, explicit)
        self.assertEqual(implicit, Token(TokenId(token_data_id, 0), 1))
        self.assertEqual(implicit_key, explicit_key)
        self.assertEqual(implicit_key["property_version"], "0")
        self.client.account_resource.assert_awaited_with(
            self.alice.address(), TOKEN_STORE
        )

    async def test_missing_balance_is_not_zero(self):
        self.client.account_resource.return_value = {
            "type": "0x3::token::TokenStore",
            "data": {"tokens": {"handle": "0x13"}},
        }
        self.client.get_table_item.side_effect = TableItemNotFound(
            "not found", "0x13", {}
        )
        with self.assertRaises(TableItemNotFound):
            await self.token_client.get_token_balance_for_account(
                self.bob.address(),
                TokenId(TokenDataId(self.alice.address(), "Col", "Tok")).to_json(),
            )


if __name__ == "__main__":
    unittest.main()
