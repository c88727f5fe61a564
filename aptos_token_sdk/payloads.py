# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Script function payloads for the token operations.

Every builder here is pure: it takes the operation's parameters and returns a
:class:`~aptos_token_sdk.transactions.ScriptFunctionPayload` for the
``0x3::token`` or ``0x3::token_transfers`` module. Argument order is fixed by
the deployed Move functions:

=====================  ========================================================
Operation              Arguments
=====================  ========================================================
create_collection      name, description, uri, maximum, mutate_setting[3]
create_token           collection, name, description, supply, maximum, uri,
                       royalty_payee, royalty_denominator, royalty_numerator,
                       mutate_setting[5], property_keys, property_values,
                       property_types
offer_token            receiver, creator, collection, name, property_version,
                       amount
claim_token            sender, creator, collection, name, property_version
cancel_token_offer     receiver, creator, collection, name, property_version
=====================  ========================================================

Text is hex encoded, integers are decimal strings and addresses are in their
canonical form.

Examples:
    Building a payload by operation name::

        payload = build(
            "create_collection",
            name="Alice's",
            description="Alice's simple collection",
            uri="https://aptos.dev",
        )
"""

from __future__ import annotations

import inspect
import unittest
from dataclasses import astuple, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .account_address import AccountAddress
from .encoding import encode_str, encode_str_list
from .token_types import NUMBER_MAX
from .transactions import ScriptFunctionPayload

TOKEN_MODULE = "0x3::token"
TOKEN_TRANSFERS_MODULE = "0x3::token_transfers"


@dataclass(frozen=True)
class CollectionMutabilitySettings:
    """Which collection fields can be changed after creation."""

    description: bool = False
    uri: bool = False
    maximum: bool = False

    def to_json(self) -> List[bool]:
        return list(astuple(self))


@dataclass(frozen=True)
class TokenMutabilitySettings:
    """Which token fields can be changed after creation."""

    maximum: bool = False
    uri: bool = False
    royalty: bool = False
    description: bool = False
    properties: bool = False

    def to_json(self) -> List[bool]:
        return list(astuple(self))


@dataclass(frozen=True)
class TokenOptions:
    """Optional token creation arguments.

    Attributes:
        royalty_payee: Receives royalties; the creator when left unset.
        royalty_denominator: Royalty is numerator / denominator of a sale.
        royalty_numerator: See royalty_denominator.
        property_keys: Names of the token's properties.
        property_values: Values of the token's properties, one per key.
        property_types: Move type names of the values, one per key.
        mutability: Which fields stay mutable after creation.
    """

    royalty_payee: Optional[AccountAddress | str] = None
    royalty_denominator: int = 0
    royalty_numerator: int = 0
    property_keys: List[str] = field(default_factory=list)
    property_values: List[str] = field(default_factory=list)
    property_types: List[str] = field(default_factory=list)
    mutability: TokenMutabilitySettings = field(
        default_factory=TokenMutabilitySettings
    )


class PropertyLengthMismatch(ValueError):
    """The property keys, values and types lists do not have the same length"""

    def __init__(self, keys: int, values: int, types: int):
        super().__init__(
            f"property_keys ({keys}), property_values ({values}) and "
            f"property_types ({types}) must have the same length"
        )


def create_collection_payload(
    name: str,
    description: str,
    uri: str,
    maximum: Optional[int] = None,
    mutability: Optional[CollectionMutabilitySettings] = None,
) -> ScriptFunctionPayload:
    """Build the payload for a new collection.

    Args:
        maximum: Cap on the number of token types, unbounded when omitted.
        mutability: Which collection fields stay mutable, none when omitted.
    """
    if mutability is None:
        mutability = CollectionMutabilitySettings()
    return ScriptFunctionPayload.natural(
        TOKEN_MODULE,
        "create_collection_script",
        [],
        [
            encode_str(name),
            encode_str(description),
            encode_str(uri),
            str(NUMBER_MAX if maximum is None else maximum),
            mutability.to_json(),
        ],
    )


def create_token_payload(
    creator: AccountAddress | str,
    collection: str,
    name: str,
    description: str,
    supply: int,
    uri: str,
    maximum: Optional[int] = None,
    options: Optional[TokenOptions] = None,
) -> ScriptFunctionPayload:
    """
    Build the payload for minting a new token type into an existing collection.

    Args:
        creator: The creating account; the royalty payee unless options
            names another.
        maximum: Supply cap, unbounded when omitted.
        options: Royalty, properties and mutability; defaults when omitted.

    Raises:
        PropertyLengthMismatch: If the property lists differ in length.
    """
    if options is None:
        options = TokenOptions()
    keys = len(options.property_keys)
    values = len(options.property_values)
    types = len(options.property_types)
    if not keys == values == types:
        raise PropertyLengthMismatch(keys, values, types)

    royalty_payee = AccountAddress.normalize(
        creator if options.royalty_payee is None else options.royalty_payee
    )
    return ScriptFunctionPayload.natural(
        TOKEN_MODULE,
        "create_token_script",
        [],
        [
            encode_str(collection),
            encode_str(name),
            encode_str(description),
            str(supply),
            str(NUMBER_MAX if maximum is None else maximum),
            encode_str(uri),
            str(royalty_payee),
            str(options.royalty_denominator),
            str(options.royalty_numerator),
            options.mutability.to_json(),
            encode_str_list(options.property_keys),
            encode_str_list(options.property_values),
            encode_str_list(options.property_types),
        ],
    )


def offer_token_payload(
    receiver: AccountAddress | str,
    creator: AccountAddress | str,
    collection: str,
    name: str,
    amount: int,
    property_version: int = 0,
) -> ScriptFunctionPayload:
    return ScriptFunctionPayload.natural(
        TOKEN_TRANSFERS_MODULE,
        "offer_script",
        [],
        [
            str(AccountAddress.normalize(receiver)),
            str(AccountAddress.normalize(creator)),
            encode_str(collection),
            encode_str(name),
            str(property_version),
            str(amount),
        ],
    )


def claim_token_payload(
    sender: AccountAddress | str,
    creator: AccountAddress | str,
    collection: str,
    name: str,
    property_version: int = 0,
) -> ScriptFunctionPayload:
    return ScriptFunctionPayload.natural(
        TOKEN_TRANSFERS_MODULE,
        "claim_script",
        [],
        [
            str(AccountAddress.normalize(sender)),
            str(AccountAddress.normalize(creator)),
            encode_str(collection),
            encode_str(name),
            str(property_version),
        ],
    )


def cancel_token_offer_payload(
    receiver: AccountAddress | str,
    creator: AccountAddress | str,
    collection: str,
    name: str,
    property_version: int = 0,
) -> ScriptFunctionPayload:
    return ScriptFunctionPayload.natural(
        TOKEN_TRANSFERS_MODULE,
        "cancel_offer_script",
        [],
        [
            str(AccountAddress.normalize(receiver)),
            str(AccountAddress.normalize(creator)),
            encode_str(collection),
            encode_str(name),
            str(property_version),
        ],
    )


BUILDERS: Dict[str, Callable[..., ScriptFunctionPayload]] = {
    "create_collection": create_collection_payload,
    "create_token": create_token_payload,
    "offer_token": offer_token_payload,
    "claim_token": claim_token_payload,
    "cancel_token_offer": cancel_token_offer_payload,
}


def build(operation: str, **params: Any) -> ScriptFunctionPayload:
    """Build the payload for a token operation by name.

    Raises:
        KeyError: For an unknown operation.
        TypeError: If params do not match the operation's arguments.
    """
    return BUILDERS[operation](**params)


class Test(unittest.TestCase):
    def setUp(self):
        self.creator = AccountAddress.from_str_relaxed("b0b")
        self.receiver = AccountAddress.from_str_relaxed("a11ce")

    def test_create_collection(self):
        payload = create_collection_payload("Col", "desc", "uri")
        self.assertEqual(str(payload.module), "0x3::token")
        self.assertEqual(payload.function, "create_collection_script")
        self.assertEqual(
            payload.arguments,
            [
                encode_str("Col"),
                encode_str("desc"),
                encode_str("uri"),
                "9007199254740991",
                [False, False, False],
            ],
        )

    def test_create_collection_with_maximum(self):
        payload = create_collection_payload(
            "Col", "desc", "uri", 5, CollectionMutabilitySettings(uri=True)
        )
        self.assertEqual(payload.arguments[3], "5")
        self.assertEqual(payload.arguments[4], [False, True, False])

    def test_create_token_defaults(self):
        payload = create_token_payload(self.creator, "Col", "Tok", "d", 1, "uri")
        self.assertEqual(payload.function, "create_token_script")
        self.assertEqual(
            payload.arguments,
            [
                encode_str("Col"),
                encode_str("Tok"),
                encode_str("d"),
                "1",
                str(NUMBER_MAX),
                encode_str("uri"),
                str(self.creator),
                "0",
                "0",
                [False] * 5,
                [],
                [],
                [],
            ],
        )

    def test_create_token_options(self):
        options = TokenOptions(
            royalty_payee="0xa11ce",
            royalty_denominator=100,
            royalty_numerator=5,
            property_keys=["level"],
            property_values=["1"],
            property_types=["u64"],
            mutability=TokenMutabilitySettings(properties=True),
        )
        payload = create_token_payload(
            str(self.creator), "Col", "Tok", "d", 1, "uri", 10, options
        )
        self.assertEqual(payload.arguments[4], "10")
        self.assertEqual(payload.arguments[6], str(self.receiver))
        self.assertEqual(payload.arguments[7:9], ["100", "5"])
        self.assertEqual(payload.arguments[9], [False, False, False, False, True])
        self.assertEqual(payload.arguments[10:], [["6c6576656c"], ["31"], ["753634"]])

    def test_defaults_are_built_per_call(self):
        for builder, name in [
            (create_collection_payload, "mutability"),
            (create_token_payload, "options"),
        ]:
            self.assertIsNone(inspect.signature(builder).parameters[name].default)

        self.assertIsNot(TokenOptions().property_keys, TokenOptions().property_keys)
        self.assertIsNot(TokenOptions().mutability, TokenOptions().mutability)

        first = create_token_payload(self.creator, "Col", "Tok", "d", 1, "uri")
        first.arguments[10].append("6c6576656c")
        second = create_token_payload(self.creator, "Col", "Tok", "d", 1, "uri")
        self.assertEqual(second.arguments[10:], [[], [], []])

    def test_property_length_mismatch(self):
        options = TokenOptions(property_keys=["a", "b"], property_values=["1"])
        with self.assertRaises(PropertyLengthMismatch):
            create_token_payload(
                self.creator, "Col", "Tok", "d", 1, "uri", None, options
            )

    def test_transfer_payloads(self):
        offer = offer_token_payload(self.receiver, self.creator, "Col", "Tok", 1)
        self.assertEqual(str(offer.module), "0x3::token_transfers")
        self.assertEqual(offer.function, "offer_script")
        self.assertEqual(
            offer.arguments,
            [
                str(self.receiver),
                str(self.creator),
                encode_str("Col"),
                encode_str("Tok"),
                "0",
                "1",
            ],
        )

        claim = claim_token_payload(str(self.creator), self.creator, "Col", "Tok", 2)
        self.assertEqual(claim.function, "claim_script")
        self.assertEqual(claim.arguments[0], str(self.creator))
        self.assertEqual(claim.arguments[4], "2")

        cancel = cancel_token_offer_payload(self.receiver, self.creator, "Col", "Tok")
        self.assertEqual(cancel.function, "cancel_offer_script")
        self.assertEqual(cancel.arguments[4], "0")

    def test_build(self):
        self.assertEqual(
            build(
                "claim_token",
                sender=self.creator,
                creator=self.creator,
                collection="Col",
                name="Tok",
            ),
            claim_token_payload(self.creator, self.creator, "Col", "Tok"),
        )
        with self.assertRaises(KeyError):
            build("burn_token")
        with self.assertRaises(TypeError):
            build("create_collection", name="Col")


if __name__ == "__main__":
    unittest.main()
