# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Resolution of token state through account resources and tables.

Token state is not stored in account resources directly. A registry resource
on the account holds the handle of a table, and the state is an item in that
table::

    account ──resource──▶ 0x3::token::Collections ──collection_data.handle──▶
        table<String, CollectionData>

The :class:`ResourceResolver` walks this in two round trips: it fetches the
registry resource and extracts the handle, then reads the item by a typed key.
Handles are fetched fresh on every query.

Resource types are matched structurally on address, module, name and generic
type parameters, so a same-named struct from another module or with other
type parameters never stands in for the expected one.

Table values are decoded by the parser registered for the declared value
type, producing a typed value object or raising :class:`DecodeError`.
"""

from __future__ import annotations

import logging
import unittest
import unittest.mock
from typing import Any, Callable, Dict, Sequence

from .account_address import AccountAddress
from .async_client import ResourceNotFound, RestClient
from .token_types import CollectionData, Token, TokenData, TokenDataId, TokenId
from .type_tag import StructTag

COLLECTIONS = StructTag.from_str("0x3::token::Collections")
TOKEN_STORE = StructTag.from_str("0x3::token::TokenStore")
STRING = "0x1::string::String"

# Parsers for table values, keyed by the value's struct tag
DECODERS: Dict[StructTag, Callable[[Dict[str, Any]], Any]] = {
    StructTag.from_str(value_type.struct_tag): value_type.parse
    for value_type in [CollectionData, TokenData, Token, TokenDataId, TokenId]
}


class ResourceTypeMismatch(Exception):
    """A resource was found but its type is not the expected one"""

    expected: StructTag
    actual: Any

    def __init__(self, expected: StructTag, actual: Any):
        super().__init__(f"expected {expected}, found {actual}")
        self.expected = expected
        self.actual = actual


class DecodeError(Exception):
    """A value could not be decoded as its declared type"""

    value_type: str
    value: Any

    def __init__(self, message: str, value_type: str, value: Any):
        super().__init__(message)
        self.value_type = value_type
        self.value = value


def decode(value_type: StructTag | str, value: Any) -> Any:
    """
    Decode a table value with the parser registered for its type.

    Raises:
        DecodeError: If no parser is registered or the value does not fit.
    """
    tag = StructTag.from_json(value_type)
    decoder = DECODERS.get(tag)
    if decoder is None:
        raise DecodeError(f"no decoder for {tag}", str(tag), value)
    if not isinstance(value, dict):
        raise DecodeError(f"{tag} expects an object, got {value!r}", str(tag), value)
    try:
        return decoder(value)
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"invalid {tag}: {e}", str(tag), value) from e


def find_resource(
    resources: Sequence[Dict[str, Any]], resource_type: StructTag | str
) -> Dict[str, Any]:
    """
    Pick the resource of exactly the given type out of a resource listing.

    Entries whose type cannot be parsed are skipped.

    Raises:
        ResourceNotFound: If no resource has that type.
    """
    expected = StructTag.from_json(resource_type)
    for resource in resources:
        try:
            actual = StructTag.from_json(resource["type"])
        except (KeyError, TypeError, ValueError):
            logging.debug(f"skipping resource with unreadable type: {resource}")
            continue
        if actual == expected:
            return resource
    raise ResourceNotFound(f"{expected} not found", str(expected))


def extract_handle(
    resource: Dict[str, Any], resource_type: StructTag | str, field_path: str
) -> str:
    """
    Read the table handle at a dotted path, e.g. ``collection_data``, in a resource.

    Both ``collection_data`` and ``collection_data.handle`` address the same
    handle.

    Raises:
        ResourceTypeMismatch: If the resource is not of resource_type.
        DecodeError: If the path does not lead to a handle.
    """
    expected = StructTag.from_json(resource_type)
    actual = resource.get("type")
    if actual is None or StructTag.from_json(actual) != expected:
        raise ResourceTypeMismatch(expected, actual)

    value: Any = resource.get("data")
    path = field_path.split(".")
    if path[-1] != "handle":
        path.append("handle")
    for name in path:
        if not isinstance(value, dict) or name not in value:
            raise DecodeError(
                f"{expected} has no {field_path} handle", str(expected), resource
            )
        value = value[name]
    if not isinstance(value, str):
        raise DecodeError(f"{expected} handle is not a string", str(expected), value)
    return value


class ResourceResolver:
    """Looks up typed items in the tables referenced by account resources."""

    _client: RestClient

    def __init__(self, client: RestClient):
        self._client = client

    async def resolve_table_handle(
        self,
        account: AccountAddress | str,
        resource_type: StructTag | str,
        field_path: str,
    ) -> str:
        """
        Fetch a resource from an account and return the table handle it holds.

        Args:
            account: The account holding the resource.
            resource_type: The expected resource type, e.g. COLLECTIONS.
            field_path: Where the table sits in the resource, e.g. ``token_data``.

        Returns:
            The table handle.
        """
        account = AccountAddress.normalize(account)
        resource = await self._client.account_resource(account, resource_type)
        handle = extract_handle(resource, resource_type, field_path)
        logging.debug(f"{resource_type}.{field_path} of {account}: {handle}")
        return handle

    async def resolve_table_handle_from_resources(
        self,
        account: AccountAddress | str,
        resource_type: StructTag | str,
        field_path: str,
    ) -> str:
        """Like resolve_table_handle but searches the full resource listing."""
        account = AccountAddress.normalize(account)
        resources = await self._client.account_resources(account)
        resource = find_resource(resources, resource_type)
        handle = extract_handle(resource, resource_type, field_path)
        logging.debug(f"{resource_type}.{field_path} of {account}: {handle}")
        return handle

    async def lookup(
        self,
        handle: str,
        key_type: StructTag | str,
        value_type: StructTag | str,
        key: Any,
    ) -> Any:
        """
        Read a table item and decode it as value_type.

        Raises:
            TableItemNotFound: If the table has no item for the key.
            DecodeError: If the item cannot be decoded as value_type.
        """
        value = await self._client.get_table_item(
            handle, str(key_type), str(value_type), key
        )
        return decode(value_type, value)


class Test(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.address = AccountAddress.from_str_relaxed("b0b")
        self.collections = {
            "type": "0x3::token::Collections",
            "data": {
                "collection_data": {"handle": "0x11"},
                "token_data": {"handle": "0x12"},
            },
        }
        self.client = unittest.mock.AsyncMock()
        self.resolver = ResourceResolver(self.client)

    async def test_resolve_table_handle(self):
        self.client.account_resource.return_value = self.collections
        handle = await self.resolver.resolve_table_handle(
            str(self.address), COLLECTIONS, "token_data"
        )
        self.assertEqual(handle, "0x12")
        self.client.account_resource.assert_awaited_once_with(
            self.address, COLLECTIONS
        )

    async def test_resolve_from_resources(self):
        self.client.account_resources.return_value = [
            {"type": "0x1::account::Account", "data": {}},
            {"type": "0x4::token::Collections", "data": {"collection_data": "x"}},
            self.collections,
        ]
        handle = await self.resolver.resolve_table_handle_from_resources(
            self.address, COLLECTIONS, "collection_data.handle"
        )
        self.assertEqual(handle, "0x11")

    async def test_resources_with_vector_generics(self):
        holder = {"type": "0x1::thing::Holder<vector<u8>>", "data": {}}
        unreadable = {"type": "0x1::thing::Holder<vector<u8, u8>>", "data": {}}
        self.client.account_resources.return_value = [
            holder,
            unreadable,
            self.collections,
        ]
        handle = await self.resolver.resolve_table_handle_from_resources(
            self.address, COLLECTIONS, "collection_data"
        )
        self.assertEqual(handle, "0x11")
        self.assertEqual(
            find_resource([unreadable, holder], "0x1::thing::Holder<vector<u8>>"),
            holder,
        )

    async def test_generic_params_do_not_match(self):
        self.client.account_resource.return_value = {
            "type": {
                "address": "0x3",
                "module": "token",
                "name": "Collections",
                "generic_type_params": ["u64"],
            },
            "data": self.collections["data"],
        }
        with self.assertRaises(ResourceTypeMismatch):
            await self.resolver.resolve_table_handle(
                self.address, COLLECTIONS, "token_data"
            )

        with self.assertRaises(ResourceNotFound):
            find_resource(
                [{"type": "0x3::token::Collections<u64>", "data": {}}], COLLECTIONS
            )

    async def test_missing_handle(self):
        self.client.account_resource.return_value = self.collections
        with self.assertRaises(DecodeError):
            await self.resolver.resolve_table_handle(
                self.address, COLLECTIONS, "tokens"
            )

    async def test_lookup(self):
        self.client.get_table_item.return_value = {
            "collection": "Col",
            "name": "Tok",
            "description": "d",
            "uri": "uri",
            "maximum": "9007199254740991",
            "supply": "1",
        }
        value = await self.resolver.lookup(
            "0x12", TokenDataId.struct_tag, TokenData.struct_tag, {"k": "v"}
        )
        self.assertEqual(value.name, "Tok")
        self.assertTrue(value.is_unbounded)
        self.client.get_table_item.assert_awaited_once_with(
            "0x12", "0x3::token::TokenDataId", "0x3::token::TokenData", {"k": "v"}
        )

    async def test_lookup_decode_error(self):
        self.client.get_table_item.return_value = {"name": "Tok"}
        with self.assertRaises(DecodeError):
            await self.resolver.lookup(
                "0x12", TokenDataId.struct_tag, TokenData.struct_tag, {}
            )

        self.client.get_table_item.return_value = "1"
        with self.assertRaises(DecodeError):
            await self.resolver.lookup("0x12", STRING, "0x1::string::String", "00")


if __name__ == "__main__":
    unittest.main()
