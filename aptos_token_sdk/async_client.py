# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Asynchronous clients for an Aptos full node and faucet.

:class:`RestClient` is the ledger transport the token client is built on. It
speaks the node's legacy JSON REST API, served at the node root, which accepts
``script_function_payload`` transactions and serves
``POST /transactions/signing_message``. The ``/v1`` API serves neither. The
client provides exactly what token operations need: drafting, signing,
submitting and awaiting JSON transactions, reading account resources, and
reading items from on-chain tables.

Non-success responses are raised as :class:`ApiError` carrying the HTTP status
code. Missing accounts, resources and table items have dedicated exceptions
so that callers can tell "not there" apart from "the node failed". Nothing in
this module retries.

Examples:
    Reading a resource::

        client = RestClient("http://127.0.0.1:8080")
        collections = await client.account_resource(
            AccountAddress.from_str("0x..."), "0x3::token::Collections"
        )
        await client.close()
"""

import asyncio
import logging
import time
import unittest
import unittest.mock
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .account import Account
from .account_address import AccountAddress
from .metadata import Metadata
from .transactions import (
    MAX_GAS_AMOUNT,
    ScriptFunctionPayload,
    SignedTransaction,
    TransactionRequest,
)
from .type_tag import StructTag


@dataclass
class ClientConfig:
    """Settings shared by every request a RestClient makes.

    Attributes:
        expiration_ttl: Seconds a drafted transaction stays valid.
        gas_unit_price: Price per gas unit in octas.
        max_gas_amount: Gas ceiling used when the caller does not pass one.
        transaction_wait_in_seconds: How long wait_for_transaction polls.
        http2: Whether to negotiate HTTP/2.
        api_key: Optional bearer token sent with every request.
    """

    expiration_ttl: int = 600
    gas_unit_price: int = 100
    max_gas_amount: int = MAX_GAS_AMOUNT
    transaction_wait_in_seconds: int = 20
    http2: bool = True
    api_key: Optional[str] = None


class RestClient:
    """A wrapper around the Aptos full node REST API."""

    _chain_id: Optional[int]
    client: httpx.AsyncClient
    client_config: ClientConfig
    base_url: str

    def __init__(self, base_url: str, client_config: ClientConfig = ClientConfig()):
        self.base_url = base_url
        # Default limits
        limits = httpx.Limits()
        # Default timeouts but do not set a pool timeout, since the idea is that jobs will wait as
        # long as progress is being made.
        timeout = httpx.Timeout(60.0, pool=None)
        # Default headers
        headers = {Metadata.APTOS_HEADER: Metadata.get_aptos_header_val()}
        self.client = httpx.AsyncClient(
            http2=client_config.http2,
            limits=limits,
            timeout=timeout,
            headers=headers,
        )
        self.client_config = client_config
        self._chain_id = None
        if client_config.api_key:
            self.client.headers["Authorization"] = f"Bearer {client_config.api_key}"

    async def close(self):
        await self.client.aclose()

    async def chain_id(self) -> int:
        if not self._chain_id:
            info = await self.info()
            self._chain_id = int(info["chain_id"])
        return self._chain_id

    async def info(self) -> Dict[str, str]:
        response = await self.client.get(self.base_url)
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.json()

    #
    # Account accessors
    #

    async def account(self, account_address: AccountAddress) -> Dict[str, str]:
        """Fetch the authentication key and the sequence number for an account."""
        response = await self._get(endpoint=f"accounts/{account_address}")
        if response.status_code == 404:
            raise AccountNotFound(f"{account_address}", account_address)
        if response.status_code >= 400:
            raise ApiError(f"{response.text} - {account_address}", response.status_code)
        return response.json()

    async def account_sequence_number(self, account_address: AccountAddress) -> int:
        account_res = await self.account(account_address)
        return int(account_res["sequence_number"])

    async def account_resource(
        self,
        account_address: AccountAddress,
        resource_type: StructTag | str,
        ledger_version: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Retrieve a single resource, e.g. ``0x3::token::Collections``, from an account.

        Raises:
            ResourceNotFound: If the account does not hold the resource.
            ApiError: For any other non-success response.
        """
        response = await self._get(
            endpoint=f"accounts/{account_address}/resource/{resource_type}",
            params={"ledger_version": ledger_version},
        )
        if response.status_code == 404:
            raise ResourceNotFound(
                f"{resource_type} not found for {account_address}", str(resource_type)
            )
        if response.status_code >= 400:
            raise ApiError(f"{response.text} - {account_address}", response.status_code)
        return response.json()

    async def account_resources(
        self,
        account_address: AccountAddress,
        ledger_version: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Retrieve every resource held by an account.

        Raises:
            AccountNotFound: If the account does not exist.
        """
        response = await self._get(
            endpoint=f"accounts/{account_address}/resources",
            params={"ledger_version": ledger_version},
        )
        if response.status_code == 404:
            raise AccountNotFound(f"{account_address}", account_address)
        if response.status_code >= 400:
            raise ApiError(f"{response.text} - {account_address}", response.status_code)
        return response.json()

    async def get_table_item(
        self,
        handle: str,
        key_type: str,
        value_type: str,
        key: Any,
        ledger_version: Optional[int] = None,
    ) -> Any:
        """
        Retrieve an item from a table by key.

        Args:
            handle: The table handle, taken from the resource owning the table.
            key_type: Move type of the key, e.g. ``0x3::token::TokenId``.
            value_type: Move type of the value, e.g. ``0x3::token::Token``.
            key: The key in its JSON encoding.

        Raises:
            TableItemNotFound: If the table has no entry for the key.
            ApiError: For any other non-success response.
        """
        response = await self._post(
            endpoint=f"tables/{handle}/item",
            data={
                "key_type": key_type,
                "value_type": value_type,
                "key": key,
            },
            params={"ledger_version": ledger_version},
        )
        if response.status_code == 404:
            raise TableItemNotFound(f"{key} not found in {handle}", handle, key)
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.json()

    #
    # Transactions
    #

    async def generate_transaction(
        self,
        sender: AccountAddress,
        payload: ScriptFunctionPayload,
        max_gas_amount: Optional[int] = None,
    ) -> TransactionRequest:
        """Draft a transaction at the sender's current sequence number."""
        sequence_number = await self.account_sequence_number(sender)
        return TransactionRequest(
            sender,
            sequence_number,
            (
                max_gas_amount
                if max_gas_amount is not None
                else self.client_config.max_gas_amount
            ),
            self.client_config.gas_unit_price,
            int(time.time()) + self.client_config.expiration_ttl,
            payload,
        )

    async def signing_message(self, request: TransactionRequest) -> bytes:
        """Ask the node for the bytes that have to be signed for a draft."""
        response = await self._post(
            endpoint="transactions/signing_message", data=request.to_json()
        )
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return bytes.fromhex(response.json()["message"].removeprefix("0x"))

    async def sign_transaction(
        self, signer: Account, request: TransactionRequest
    ) -> SignedTransaction:
        message = await self.signing_message(request)
        return SignedTransaction(request, signer.public_key(), signer.sign(message))

    async def submit_transaction(self, signed_transaction: SignedTransaction) -> str:
        """Submit a signed transaction and return its hash."""
        response = await self._post(
            endpoint="transactions", data=signed_transaction.to_json()
        )
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.json()["hash"]

    async def transaction_pending(self, txn_hash: str) -> bool:
        response = await self._get(endpoint=f"transactions/{txn_hash}")
        # A freshly submitted transaction may not be visible yet
        if response.status_code == 404:
            return True
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.json()["type"] == "pending_transaction"

    async def wait_for_transaction(self, txn_hash: str) -> None:
        """
        Poll once a second until the transaction leaves the pending state.

        Raises:
            TransactionTimeout: If it is still pending after
                ``transaction_wait_in_seconds``.
            TransactionFailed: If it was committed but did not succeed. Move
                aborts, e.g. claiming a cancelled offer, land here with the
                abort in ``vm_status``.
        """
        count = 0
        while await self.transaction_pending(txn_hash):
            if count >= self.client_config.transaction_wait_in_seconds:
                raise TransactionTimeout(f"transaction {txn_hash} timed out", txn_hash)
            await asyncio.sleep(1)
            count += 1

        transaction = await self.transaction_by_hash(txn_hash)
        if not transaction.get("success"):
            vm_status = transaction.get("vm_status", "")
            logging.info(f"transaction {txn_hash} failed: {vm_status}")
            raise TransactionFailed(f"{vm_status} - {txn_hash}", txn_hash, vm_status)

    async def transaction_by_hash(self, txn_hash: str) -> Dict[str, Any]:
        response = await self._get(endpoint=f"transactions/{txn_hash}")
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.json()

    async def _post(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        # format params:
        params = {} if params is None else params
        params = {key: val for key, val in params.items() if val is not None}
        return await self.client.post(
            url=f"{self.base_url}/{endpoint}",
            params=params,
            headers=headers,
            json=data,
        )

    async def _get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        # format params:
        params = {} if params is None else params
        params = {key: val for key, val in params.items() if val is not None}
        return await self.client.get(
            url=f"{self.base_url}/{endpoint}",
            params=params,
        )


class FaucetClient:
    """Faucet creates and funds accounts. This is a thin wrapper around that."""

    base_url: str
    rest_client: RestClient
    headers: Dict[str, str]

    def __init__(
        self, base_url: str, rest_client: RestClient, auth_token: Optional[str] = None
    ):
        self.base_url = base_url
        self.rest_client = rest_client
        self.headers = {}
        if auth_token:
            self.headers["Authorization"] = f"Bearer {auth_token}"

    async def close(self):
        await self.rest_client.close()

    async def fund_account(
        self, address: AccountAddress, amount: int, wait_for_transaction=True
    ):
        """This creates an account if it does not exist and mints the specified amount of
        coins into that account."""
        request = f"{self.base_url}/mint?amount={amount}&address={address}"
        response = await self.rest_client.client.post(request, headers=self.headers)
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        txn_hash = response.json()[0]
        if wait_for_transaction:
            await self.rest_client.wait_for_transaction(txn_hash)
        return txn_hash


class ApiError(Exception):
    """The API returned a non-success status code, e.g., >= 400"""

    status_code: int

    def __init__(self, message: str, status_code: int):
        # Call the base class constructor with the parameters it needs
        super().__init__(message)
        self.status_code = status_code


class AccountNotFound(Exception):
    """The account was not found"""

    account: AccountAddress

    def __init__(self, message: str, account: AccountAddress):
        super().__init__(message)
        self.account = account


class ResourceNotFound(Exception):
    """The underlying resource was not found"""

    resource: str

    def __init__(self, message: str, resource: str):
        super().__init__(message)
        self.resource = resource


class TableItemNotFound(Exception):
    """The table has no entry for the requested key"""

    handle: str
    key: Any

    def __init__(self, message: str, handle: str, key: Any):
        super().__init__(message)
        self.handle = handle
        self.key = key


class TransactionFailed(Exception):
    """The transaction was committed but its execution did not succeed"""

    txn_hash: str
    vm_status: str

    def __init__(self, message: str, txn_hash: str, vm_status: str):
        super().__init__(message)
        self.txn_hash = txn_hash
        self.vm_status = vm_status


class TransactionTimeout(Exception):
    """The transaction was still pending when the wait expired"""

    txn_hash: str

    def __init__(self, message: str, txn_hash: str):
        super().__init__(message)
        self.txn_hash = txn_hash


class Test(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.rest_client = RestClient("http://127.0.0.1:8080")
        self.address = AccountAddress.from_str_relaxed("b0b")

    async def asyncTearDown(self):
        await self.rest_client.close()

    def respond(self, method: str, status_code: int, body: Any):
        response = httpx.Response(status_code, json=body)
        patcher = unittest.mock.patch.object(
            self.rest_client, method, return_value=response
        )
        mock = patcher.start()
        self.addCleanup(patcher.stop)
        return mock

    async def test_account_resource_not_found(self):
        self.respond("_get", 404, {"message": "not found"})
        with self.assertRaises(ResourceNotFound) as cm:
            await self.rest_client.account_resource(
                self.address, "0x3::token::Collections"
            )
        self.assertEqual(cm.exception.resource, "0x3::token::Collections")

    async def test_account_resources_not_found(self):
        self.respond("_get", 404, {"message": "not found"})
        with self.assertRaises(AccountNotFound):
            await self.rest_client.account_resources(self.address)

    async def test_api_error_keeps_status(self):
        self.respond("_get", 500, {"message": "boom"})
        with self.assertRaises(ApiError) as cm:
            await self.rest_client.account_resource(
                self.address, "0x3::token::Collections"
            )
        self.assertEqual(cm.exception.status_code, 500)

    async def test_get_table_item(self):
        post = self.respond("_post", 200, {"amount": "1"})
        value = await self.rest_client.get_table_item(
            "0x12", "0x3::token::TokenId", "0x3::token::Token", {"k": "v"}
        )
        self.assertEqual(value, {"amount": "1"})
        post.assert_awaited_once_with(
            endpoint="tables/0x12/item",
            data={
                "key_type": "0x3::token::TokenId",
                "value_type": "0x3::token::Token",
                "key": {"k": "v"},
            },
            params={"ledger_version": None},
        )

    async def test_get_table_item_not_found(self):
        self.respond("_post", 404, {"message": "not found"})
        with self.assertRaises(TableItemNotFound) as cm:
            await self.rest_client.get_table_item(
                "0x12", "0x1::string::String", "0x3::token::CollectionData", "6162"
            )
        self.assertEqual(cm.exception.handle, "0x12")

    async def test_generate_transaction(self):
        self.respond("_get", 200, {"sequence_number": "3", "authentication_key": ""})
        payload = ScriptFunctionPayload.natural("0x3::token", "f", [], [])
        request = await self.rest_client.generate_transaction(
            self.address, payload, 4000
        )
        self.assertEqual(request.sequence_number, 3)
        self.assertEqual(request.max_gas_amount, 4000)
        self.assertEqual(request.gas_unit_price, 100)
        self.assertGreater(request.expiration_timestamp_secs, int(time.time()))

    async def test_sign_transaction(self):
        signer = Account.generate()
        payload = ScriptFunctionPayload.natural("0x3::token", "f", [], [])
        request = TransactionRequest(signer.address(), 0, 4000, 100, 1, payload)
        self.respond("_post", 200, {"message": "0x0102"})

        signed = await self.rest_client.sign_transaction(signer, request)
        self.assertTrue(signer.public_key().verify(b"\x01\x02", signed.signature))

    async def test_wait_for_failed_transaction(self):
        self.respond(
            "_get",
            200,
            {"type": "user_transaction", "success": False, "vm_status": "ABORTED"},
        )
        with self.assertRaises(TransactionFailed) as cm:
            await self.rest_client.wait_for_transaction("0xabc")
        self.assertEqual(cm.exception.vm_status, "ABORTED")

    async def test_transaction_lookup_path(self):
        get = self.respond("_get", 200, {"type": "user_transaction", "success": True})
        await self.rest_client.wait_for_transaction("0xabc")
        get.assert_awaited_with(endpoint="transactions/0xabc")

    async def test_signing_message_path(self):
        post = self.respond("_post", 200, {"message": "0x0102"})
        payload = ScriptFunctionPayload.natural("0x3::token", "f", [], [])
        request = TransactionRequest(self.address, 0, 4000, 100, 1, payload)
        self.assertEqual(await self.rest_client.signing_message(request), b"\x01\x02")
        post.assert_awaited_once_with(
            endpoint="transactions/signing_message", data=request.to_json()
        )

    async def test_wait_for_transaction_timeout(self):
        self.rest_client.client_config = ClientConfig(transaction_wait_in_seconds=0)
        self.respond("_get", 200, {"type": "pending_transaction"})
        with self.assertRaises(TransactionTimeout):
            await self.rest_client.wait_for_transaction("0xabc")


if __name__ == "__main__":
    unittest.main()
