# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Value objects for the Aptos token standard (``0x3::token``).

Tokens are identified in layers:

- a :class:`TokenDataId` (creator, collection, name) names a token *type*;
- a :class:`TokenId` adds the property version, naming one edition of that
  type; version ``0`` is the original, unmutated edition;
- a :class:`Token` is a balance record: a TokenId and the amount held.

:class:`CollectionData` and :class:`TokenData` are read-only projections of
the on-chain collection and token-type state.

Each type knows its Move struct tag and parses itself from the JSON a node
returns for it. Identifiers also render themselves as table keys: text fields
in keys are hex encoded, the same way text is encoded in payloads.

Values are built per call and never cached.
"""

from __future__ import annotations

import unittest
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

from .account_address import AccountAddress
from .encoding import decode_move_string, decode_str, encode_str

# Largest integer that survives a round trip through a JSON number, used as
# the "no maximum" value for collections and tokens.
NUMBER_MAX = 9007199254740991


def parse_u64(value: Any) -> int:
    """u64 values arrive as decimal strings; plain integers are accepted too."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"Not a u64: {value!r}")
    return int(value)


def parse_optional_u64(value: Any) -> Optional[int]:
    """Decode an ``Option<u64>``, either bare or as ``{"vec": [...]}``."""
    if value is None:
        return None
    if isinstance(value, dict):
        vec = value["vec"]
        if len(vec) > 1:
            raise ValueError(f"Not an Option: {value!r}")
        return parse_u64(vec[0]) if vec else None
    return parse_u64(value)


def is_unbounded(maximum: Optional[int]) -> bool:
    return maximum is None or maximum >= NUMBER_MAX


@dataclass(frozen=True)
class TokenDataId:
    creator: AccountAddress
    collection: str
    name: str

    struct_tag: ClassVar[str] = "0x3::token::TokenDataId"

    def to_json(self) -> Dict[str, str]:
        return {
            "creator": str(self.creator),
            "collection": encode_str(self.collection),
            "name": encode_str(self.name),
        }

    @staticmethod
    def parse(resource: Dict[str, Any]) -> TokenDataId:
        return TokenDataId(
            AccountAddress.from_str_relaxed(resource["creator"]),
            decode_move_string(resource["collection"]),
            decode_move_string(resource["name"]),
        )

    def __str__(self) -> str:
        return f"TokenDataId[creator: {self.creator}, collection: {self.collection}, name: {self.name}]"


@dataclass(frozen=True)
class TokenId:
    token_data_id: TokenDataId
    property_version: int = 0

    struct_tag: ClassVar[str] = "0x3::token::TokenId"

    def to_json(self) -> Dict[str, Any]:
        return {
            "token_data_id": self.token_data_id.to_json(),
            "property_version": str(self.property_version),
        }

    @staticmethod
    def parse(resource: Dict[str, Any]) -> TokenId:
        return TokenId(
            TokenDataId.parse(resource["token_data_id"]),
            parse_u64(resource["property_version"]),
        )

    @staticmethod
    def from_json(value: TokenId | Dict[str, Any]) -> TokenId:
        """Accept either a TokenId or the key form rendered by :meth:`to_json`.

        The collection and token names of the key form are hex encoded UTF-8.

        Raises:
            ValueError: If a name is not hex encoded UTF-8.
        """
        if isinstance(value, TokenId):
            return value
        data_id = value["token_data_id"]
        return TokenId(
            TokenDataId(
                AccountAddress.normalize(data_id["creator"]),
                decode_str(data_id["collection"]),
                decode_str(data_id["name"]),
            ),
            parse_u64(value.get("property_version", 0)),
        )

    def __str__(self) -> str:
        return f"TokenId[{self.token_data_id}, property_version: {self.property_version}]"


@dataclass(frozen=True)
class Token:
    """A balance record: how much of one token edition an account holds."""

    id: TokenId
    amount: int

    struct_tag: ClassVar[str] = "0x3::token::Token"

    @staticmethod
    def parse(resource: Dict[str, Any]) -> Token:
        # Older nodes name the balance field "value"
        amount = resource["amount"] if "amount" in resource else resource["value"]
        return Token(TokenId.parse(resource["id"]), parse_u64(amount))

    def __str__(self) -> str:
        return f"Token[{self.id}, amount: {self.amount}]"


@dataclass(frozen=True)
class CollectionData:
    name: str
    description: str
    uri: str
    count: int
    maximum: Optional[int]

    struct_tag: ClassVar[str] = "0x3::token::CollectionData"

    @property
    def is_unbounded(self) -> bool:
        return is_unbounded(self.maximum)

    @staticmethod
    def parse(resource: Dict[str, Any]) -> CollectionData:
        """
        Parse collection data returned from the creator's collection table.

        Args:
            resource: Table value from the node.

        Returns:
            Parsed CollectionData instance.
        """
        return CollectionData(
            decode_move_string(resource["name"]),
            decode_move_string(resource["description"]),
            decode_move_string(resource["uri"]),
            parse_u64(resource.get("supply", resource.get("count"))),
            parse_optional_u64(resource.get("maximum")),
        )

    def __str__(self) -> str:
        return f"CollectionData[name: {self.name}, description: {self.description}, uri: {self.uri}, count: {self.count}, maximum: {self.maximum}]"


@dataclass(frozen=True)
class TokenData:
    collection: str
    name: str
    description: str
    uri: str
    maximum: Optional[int]
    supply: int

    struct_tag: ClassVar[str] = "0x3::token::TokenData"

    @property
    def is_unbounded(self) -> bool:
        return is_unbounded(self.maximum)

    @staticmethod
    def parse(resource: Dict[str, Any]) -> TokenData:
        return TokenData(
            decode_move_string(resource["collection"]),
            decode_move_string(resource["name"]),
            decode_move_string(resource["description"]),
            decode_move_string(resource["uri"]),
            parse_optional_u64(resource.get("maximum")),
            parse_u64(resource["supply"]),
        )

    def __str__(self) -> str:
        return f"TokenData[collection: {self.collection}, name: {self.name}, description: {self.description}, uri: {self.uri}, maximum: {self.maximum}, supply: {self.supply}]"


class Test(unittest.TestCase):
    def setUp(self):
        self.creator = AccountAddress.from_str_relaxed("b0b")
        self.token_data_id = TokenDataId(self.creator, "Col", "Tok")

    def test_token_data_id_key(self):
        self.assertEqual(
            self.token_data_id.to_json(),
            {"creator": str(self.creator), "collection": "436f6c", "name": "546f6b"},
        )

    def test_token_id_key(self):
        token_id = TokenId(self.token_data_id)
        self.assertEqual(token_id.property_version, 0)
        self.assertEqual(
            token_id.to_json(),
            {"token_data_id": self.token_data_id.to_json(), "property_version": "0"},
        )
        self.assertEqual(TokenId.from_json(token_id.to_json()), token_id)
        self.assertIs(TokenId.from_json(token_id), token_id)

    def test_token_id_hex_looking_names(self):
        token_id = TokenId(TokenDataId(self.creator, "2021", "4142"), 3)
        self.assertEqual(TokenId.from_json(token_id.to_json()), token_id)

    def test_token_id_plain_names_rejected(self):
        with self.assertRaises(ValueError):
            TokenId.from_json(
                {
                    "token_data_id": {
                        "creator": "0xb0b",
                        "collection": "Collection X",
                        "name": "Token Y",
                    },
                }
            )

    def test_parse_token(self):
        token_id = {
            "token_data_id": {"creator": "0xb0b", "collection": "Col", "name": "Tok"},
            "property_version": "0",
        }
        token = Token.parse({"id": token_id, "amount": "3"})
        self.assertEqual(token, Token(TokenId(self.token_data_id, 0), 3))
        self.assertEqual(Token.parse({"id": token_id, "value": "2"}).amount, 2)

    def test_parse_collection_data(self):
        data = CollectionData.parse(
            {
                "name": "Col",
                "description": "desc",
                "uri": "uri",
                "supply": "1",
                "maximum": str(NUMBER_MAX),
            }
        )
        self.assertEqual(data.name, "Col")
        self.assertEqual(data.count, 1)
        self.assertEqual(data.maximum, NUMBER_MAX)
        self.assertTrue(data.is_unbounded)

    def test_parse_token_data(self):
        data = TokenData.parse(
            {
                "collection": {"bytes": "0x436f6c"},
                "name": "Tok",
                "description": "d",
                "uri": "uri",
                "maximum": "10",
                "supply": "1",
            }
        )
        self.assertEqual(data, TokenData("Col", "Tok", "d", "uri", 10, 1))
        self.assertFalse(data.is_unbounded)

    def test_optional_u64(self):
        self.assertIsNone(parse_optional_u64({"vec": []}))
        self.assertEqual(parse_optional_u64({"vec": ["5"]}), 5)
        self.assertEqual(parse_optional_u64("7"), 7)
        with self.assertRaises(ValueError):
            parse_u64([1])


if __name__ == "__main__":
    unittest.main()
