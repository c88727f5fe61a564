# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Aptos Token SDK - issue, transfer and query tokens of the Aptos token standard.

Write operations (creating collections and tokens, offering, claiming and
cancelling token transfers) are built as script function payloads and sent
through a sign, submit and confirm pipeline. Read operations (collection data,
token data and token balances) walk from an account resource to the table it
references and decode the item found there.

The SDK speaks the legacy JSON REST API that a node serves at its root, with
``script_function_payload`` transactions signed through
``POST /transactions/signing_message``. The ``/v1`` API does not serve that
flow.

Quick Start::

    import asyncio
    from aptos_token_sdk.account import Account
    from aptos_token_sdk.async_client import FaucetClient, RestClient
    from aptos_token_sdk.token_client import TokenClient

    async def main():
        rest_client = RestClient("http://127.0.0.1:8080")
        faucet_client = FaucetClient("http://127.0.0.1:8081", rest_client)
        token_client = TokenClient(rest_client)

        alice = Account.generate()
        await faucet_client.fund_account(alice.address(), 100_000_000)

        await token_client.create_collection(
            alice, "Alice's", "Alice's simple collection", "https://aptos.dev"
        )
        print(await token_client.get_collection_data(alice.address(), "Alice's"))

        await rest_client.close()

    asyncio.run(main())

Module Organization:
    - **token_client**: TokenClient, the entry point for token operations
    - **payloads**: script function payloads for each write operation
    - **transactions**: transaction values and the submission pipeline
    - **resources**: table handle resolution and typed table lookups
    - **token_types**: TokenId, Token, CollectionData, TokenData and friends
    - **encoding**: hex encoding of text arguments
    - **async_client**: RestClient and FaucetClient
    - **account**, **account_address**, **ed25519**, **type_tag**: accounts,
      keys and Move type descriptors
"""
