# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Command-line queries for collections, token types and token balances.

Examples:
    Read a collection::

        python -m aptos_token_sdk.cli collection-data \
            --rest-api http://127.0.0.1:8080 \
            --creator 0x1234... \
            --collection "Alice's"

    Read how much of a token an account holds::

        python -m aptos_token_sdk.cli token-balance \
            --rest-api http://127.0.0.1:8080 \
            --creator 0x1234... \
            --collection "Alice's" \
            --name "Alice's first token" \
            --owner 0x5678...
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import unittest
import unittest.mock
from typing import Any, List

from .account_address import AccountAddress
from .async_client import RestClient
from .token_client import TokenClient
from .token_types import CollectionData, TokenDataId, TokenId

COMMANDS = ["collection-data", "token-data", "token-balance"]


async def query(token_client: TokenClient, parsed_args: argparse.Namespace) -> Any:
    if parsed_args.command == "collection-data":
        return await token_client.get_collection_data(
            parsed_args.creator, parsed_args.collection
        )
    if parsed_args.command == "token-data":
        return await token_client.get_token_data(
            parsed_args.creator, parsed_args.collection, parsed_args.name
        )
    if parsed_args.owner is None:
        return await token_client.get_token_balance(
            parsed_args.creator,
            parsed_args.collection,
            parsed_args.name,
            parsed_args.property_version,
        )
    token_id = TokenId(
        TokenDataId(parsed_args.creator, parsed_args.collection, parsed_args.name),
        parsed_args.property_version,
    )
    return await token_client.get_token_balance_for_account(parsed_args.owner, token_id)


def parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Aptos token queries")
    parser.add_argument(
        "command", type=str, help="The command to execute", choices=COMMANDS
    )
    parser.add_argument(
        "--rest-api",
        help="The legacy JSON REST API of a node, e.g. http://127.0.0.1:8080",
        type=str,
    )
    parser.add_argument(
        "--creator",
        help="The account that created the collection",
        type=AccountAddress.from_str_relaxed,
    )
    parser.add_argument("--collection", help="The collection name", type=str)
    parser.add_argument("--name", help="The token name", type=str)
    parser.add_argument(
        "--owner",
        help="The account holding the token, defaults to the creator",
        type=AccountAddress.from_str_relaxed,
    )
    parser.add_argument(
        "--property-version",
        help="The token's property version",
        type=int,
        default=0,
    )
    parser.add_argument(
        "--log-level",
        help="Logging level, e.g. DEBUG",
        type=str.upper,
        default="WARNING",
    )
    return parser


async def main(args: List[str]):
    arg_parser = parser()
    parsed_args = arg_parser.parse_args(args)

    if parsed_args.rest_api is None:
        arg_parser.error("Missing required argument '--rest-api'")
    if parsed_args.creator is None:
        arg_parser.error("Missing required argument '--creator'")
    if parsed_args.collection is None:
        arg_parser.error("Missing required argument '--collection'")
    if parsed_args.command != "collection-data" and parsed_args.name is None:
        arg_parser.error("Missing required argument '--name'")

    logging.basicConfig(level=parsed_args.log_level)

    rest_client = RestClient(parsed_args.rest_api)
    try:
        result = await query(TokenClient(rest_client), parsed_args)
    finally:
        await rest_client.close()
    print(result)


class Test(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.token_client = unittest.mock.AsyncMock()
        self.creator = "0xb0b"

    def parse(self, *args: str) -> argparse.Namespace:
        return parser().parse_args(
            list(args) + ["--creator", self.creator, "--collection", "Col"]
        )

    async def test_collection_data(self):
        data = CollectionData("Col", "desc", "uri", 0, None)
        self.token_client.get_collection_data.return_value = data
        result = await query(self.token_client, self.parse("collection-data"))
        self.assertEqual(result, data)
        self.token_client.get_collection_data.assert_awaited_once_with(
            AccountAddress.from_str_relaxed(self.creator), "Col"
        )

    async def test_token_balance(self):
        await query(self.token_client, self.parse("token-balance", "--name", "Tok"))
        self.token_client.get_token_balance.assert_awaited_once_with(
            AccountAddress.from_str_relaxed(self.creator), "Col", "Tok", 0
        )

        await query(
            self.token_client,
            self.parse("token-balance", "--name", "Tok", "--owner", "0xa11ce"),
        )
        self.token_client.get_token_balance_for_account.assert_awaited_once_with(
            AccountAddress.from_str_relaxed("0xa11ce"),
            TokenId(
                TokenDataId(AccountAddress.from_str_relaxed(self.creator), "Col", "Tok")
            ),
        )

    def test_log_level(self):
        parsed_args = self.parse("token-data", "--log-level", "debug")
        self.assertEqual(parsed_args.log_level, "DEBUG")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
