# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Transaction values and the sign, submit and confirm pipeline.

Token operations are sent through the node's legacy JSON transaction API,
which takes ``script_function_payload`` bodies and produces signing messages
at ``POST /transactions/signing_message``:

1. the node client drafts a :class:`TransactionRequest` for the signer's
   current sequence number, carrying a :class:`ScriptFunctionPayload`;
2. the node produces the signing message for the draft and the signer's
   account signs it, giving a :class:`SignedTransaction`;
3. the signed transaction is submitted, which yields its hash;
4. the client polls until the transaction leaves the pending state and checks
   that it succeeded.

:func:`submit_transaction` runs the four steps and returns the hash once the
transaction is committed. A failure at any step aborts the whole pipeline.
Nothing is retried, since the sequence number embedded in the draft is stale
after one attempt; callers start again from the draft.
"""

from __future__ import annotations

import logging
import typing
import unittest
import unittest.mock
from dataclasses import dataclass
from typing import Any, Dict, List

from . import ed25519
from .account import Account
from .account_address import AccountAddress

if typing.TYPE_CHECKING:
    from .async_client import RestClient

# Fixed gas ceiling applied to every token transaction.
MAX_GAS_AMOUNT = 4000


@dataclass(frozen=True)
class ModuleId:
    address: AccountAddress
    name: str

    @staticmethod
    def from_str(module_id: str) -> ModuleId:
        """Parse ``"0x3::token"``."""
        address, name = module_id.split("::")
        return ModuleId(AccountAddress.from_str_relaxed(address), name)

    def __str__(self) -> str:
        return f"{self.address}::{self.name}"

    def to_json(self) -> Dict[str, str]:
        return {"address": str(self.address), "name": self.name}


@dataclass(frozen=True)
class ScriptFunctionPayload:
    """Invocation of a deployed Move script function.

    ``arguments`` must already be in their JSON API encoding: u64 values as
    decimal strings, ``vector<u8>`` values as hex strings, addresses as
    ``0x`` strings and vectors as lists.
    """

    module: ModuleId
    function: str
    type_arguments: List[str]
    arguments: List[Any]

    @staticmethod
    def natural(
        module: str, function: str, type_arguments: List[str], arguments: List[Any]
    ) -> ScriptFunctionPayload:
        return ScriptFunctionPayload(
            ModuleId.from_str(module), function, type_arguments, arguments
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "type": "script_function_payload",
            "function": {"module": self.module.to_json(), "name": self.function},
            "type_arguments": list(self.type_arguments),
            "arguments": list(self.arguments),
        }


@dataclass(frozen=True)
class TransactionRequest:
    """An unsigned transaction drafted for one sender and sequence number."""

    sender: AccountAddress
    sequence_number: int
    max_gas_amount: int
    gas_unit_price: int
    expiration_timestamp_secs: int
    payload: ScriptFunctionPayload

    def to_json(self) -> Dict[str, Any]:
        return {
            "sender": str(self.sender),
            "sequence_number": str(self.sequence_number),
            "max_gas_amount": str(self.max_gas_amount),
            "gas_unit_price": str(self.gas_unit_price),
            "expiration_timestamp_secs": str(self.expiration_timestamp_secs),
            "payload": self.payload.to_json(),
        }


@dataclass(frozen=True)
class SignedTransaction:
    request: TransactionRequest
    public_key: ed25519.PublicKey
    signature: ed25519.Signature

    def to_json(self) -> Dict[str, Any]:
        data = self.request.to_json()
        data["signature"] = {
            "type": "ed25519_signature",
            "public_key": str(self.public_key),
            "signature": str(self.signature),
        }
        return data


async def submit_transaction(
    client: RestClient,
    signer: Account,
    payload: ScriptFunctionPayload,
    max_gas_amount: int = MAX_GAS_AMOUNT,
) -> str:
    """Draft, sign, submit and wait for a transaction.

    Args:
        client: Node client used for every step.
        signer: Account that sends and signs the transaction.
        payload: The script function to invoke.
        max_gas_amount: Gas ceiling, defaults to MAX_GAS_AMOUNT.

    Returns:
        The hash of the committed transaction.

    Raises:
        ApiError: If the node rejects any step.
        TransactionFailed: If the transaction was committed but failed.
        TransactionTimeout: If it was still pending when the wait expired.
    """
    target = f"{payload.module}::{payload.function}"
    try:
        request = await client.generate_transaction(
            signer.address(), payload, max_gas_amount
        )
        logging.debug(
            f"generated {target} for {signer.address()} at {request.sequence_number}"
        )
        signed_transaction = await client.sign_transaction(signer, request)
        logging.debug(f"signed {target}")
        txn_hash = await client.submit_transaction(signed_transaction)
        logging.debug(f"submitted {target}: {txn_hash}")
        await client.wait_for_transaction(txn_hash)
    except Exception as e:
        logging.error(f"{target} from {signer.address()} failed: {e}", exc_info=True)
        raise
    logging.info(f"committed {target}: {txn_hash}")
    return txn_hash


class Test(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.signer = Account.generate()
        self.payload = ScriptFunctionPayload.natural(
            "0x3::token_transfers", "claim_script", [], ["0x1"]
        )
        self.request = TransactionRequest(
            self.signer.address(), 7, MAX_GAS_AMOUNT, 100, 1_000, self.payload
        )
        self.signed = SignedTransaction(
            self.request,
            self.signer.public_key(),
            self.signer.sign(b"message"),
        )
        self.client = unittest.mock.AsyncMock()
        self.client.generate_transaction.return_value = self.request
        self.client.sign_transaction.return_value = self.signed
        self.client.submit_transaction.return_value = "0xabc"
        self.client.wait_for_transaction.return_value = None

    def test_payload_json(self):
        self.assertEqual(
            self.payload.to_json(),
            {
                "type": "script_function_payload",
                "function": {
                    "module": {"address": "0x3", "name": "token_transfers"},
                    "name": "claim_script",
                },
                "type_arguments": [],
                "arguments": ["0x1"],
            },
        )

    def test_signed_transaction_json(self):
        data = self.signed.to_json()
        self.assertEqual(data["sequence_number"], "7")
        self.assertEqual(data["max_gas_amount"], "4000")
        self.assertEqual(data["signature"]["type"], "ed25519_signature")
        self.assertEqual(data["signature"]["public_key"], str(self.signer.public_key()))

    async def test_pipeline(self):
        txn_hash = await submit_transaction(self.client, self.signer, self.payload)

        self.assertEqual(txn_hash, "0xabc")
        self.client.generate_transaction.assert_awaited_once_with(
            self.signer.address(), self.payload, MAX_GAS_AMOUNT
        )
        self.client.sign_transaction.assert_awaited_once_with(
            self.signer, self.request
        )
        self.client.submit_transaction.assert_awaited_once_with(self.signed)
        self.client.wait_for_transaction.assert_awaited_once_with("0xabc")

    async def test_failure_aborts_pipeline(self):
        self.client.sign_transaction.side_effect = RuntimeError("signing failed")

        with self.assertRaises(RuntimeError):
            await submit_transaction(self.client, self.signer, self.payload)
        self.client.submit_transaction.assert_not_awaited()
        self.client.wait_for_transaction.assert_not_awaited()
        self.client.generate_transaction.assert_awaited_once()

    async def test_failed_confirmation_is_surfaced(self):
        self.client.wait_for_transaction.side_effect = RuntimeError("vm error")

        with self.assertRaises(RuntimeError):
            await submit_transaction(self.client, self.signer, self.payload, 10)
        self.client.generate_transaction.assert_awaited_once_with(
            self.signer.address(), self.payload, 10
        )


if __name__ == "__main__":
    unittest.main()
