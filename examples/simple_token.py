# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Create a collection and a token, then move the token from Alice to Bob.

Alice creates a collection and a single token in it, offers the token to Bob
and Bob claims it. The collection, token data and both balances are read back
along the way.

Run against a local node serving the legacy JSON API, see :mod:`examples.common`::

    python -m examples.simple_token
"""

import asyncio
import logging

from aptos_token_sdk.account import Account
from aptos_token_sdk.async_client import FaucetClient, RestClient, TableItemNotFound
from aptos_token_sdk.token_client import TokenClient
from aptos_token_sdk.token_types import TokenDataId, TokenId

from .common import FAUCET_AUTH_TOKEN, FAUCET_URL, NODE_URL


async def main():
    logging.basicConfig(level=logging.INFO)

    rest_client = RestClient(NODE_URL)
    faucet_client = FaucetClient(FAUCET_URL, rest_client, FAUCET_AUTH_TOKEN)
    token_client = TokenClient(rest_client)

    alice = Account.generate()
    bob = Account.generate()

    print("\n=== Addresses ===")
    print(f"Alice: {alice.address()}")
    print(f"Bob: {bob.address()}")

    alice_fund = faucet_client.fund_account(alice.address(), 100_000_000)
    bob_fund = faucet_client.fund_account(bob.address(), 100_000_000)
    await asyncio.gather(*[alice_fund, bob_fund])

    collection_name = "Alice's"
    token_name = "Alice's first token"

    print("\n=== Creating Collection and Token ===")

    # :!:>section_4
    txn_hash = await token_client.create_collection(
        alice, collection_name, "Alice's simple collection", "https://aptos.dev"
    )  # <:!:section_4
    print(f"Collection created: {txn_hash}")

    # :!:>section_5
    txn_hash = await token_client.create_token(
        alice,
        collection_name,
        token_name,
        "Alice's simple token",
        1,
        "https://aptos.dev/img/nyan.jpeg",
    )  # <:!:section_5
    print(f"Token created: {txn_hash}")

    # :!:>section_6
    collection_data = await token_client.get_collection_data(
        alice.address(), collection_name
    )  # <:!:section_6
    print(f"Alice's collection: {collection_data}")

    # :!:>section_7
    token_data = await token_client.get_token_data(
        alice.address(), collection_name, token_name
    )  # <:!:section_7
    print(f"Alice's token data: {token_data}")

    token_id = TokenId(TokenDataId(alice.address(), collection_name, token_name))
    balance = await token_client.get_token_balance(
        alice.address(), collection_name, token_name
    )
    print(f"Alice's token balance: {balance.amount}")

    print("\n=== Transferring the token to Bob ===")
    # :!:>section_8
    txn_hash = await token_client.offer_token(
        alice, bob.address(), alice.address(), collection_name, token_name, 1
    )  # <:!:section_8
    print(f"Offered: {txn_hash}")

    # :!:>section_9
    txn_hash = await token_client.claim_token(
        bob, alice.address(), alice.address(), collection_name, token_name
    )  # <:!:section_9
    print(f"Claimed: {txn_hash}")

    try:
        balance = await token_client.get_token_balance_for_account(
            alice.address(), token_id
        )
        print(f"Alice's token balance: {balance.amount}")
    except TableItemNotFound:
        print("Alice's token balance: 0")

    balance = await token_client.get_token_balance_for_account(bob.address(), token_id)
    print(f"Bob's token balance: {balance.amount}")

    await rest_client.close()


if __name__ == "__main__":
    asyncio.run(main())
