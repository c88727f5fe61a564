# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Move type descriptors used to identify account resources and table types.

Nodes describe resource types either as canonical strings
(``"0x3::token::Collections"``) or as JSON struct tags::

    {"address": "0x3", "module": "token", "name": "Collections",
     "generic_type_params": []}

Both forms parse into :class:`StructTag`, whose equality is structural over
the address, module, name and generic type parameters. Two structs that share
a name but live in different modules, or differ only in their generic
parameters, are different types.
"""

from __future__ import annotations

import typing
import unittest
from typing import Any, Dict, List, Tuple

from .account_address import AccountAddress


class TypeTag:
    """A Move type: either a struct or a primitive such as ``u64`` or ``address``."""

    value: StructTag | str

    def __init__(self, value: StructTag | str):
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeTag):
            return NotImplemented
        return self.value == other.value

    def __str__(self):
        return str(self.value)

    def __repr__(self):
        return self.__str__()

    @staticmethod
    def from_str(type_tag: str) -> TypeTag:
        tags, _ = StructTag._from_str_internal(type_tag, 0)
        return tags[0]

    @staticmethod
    def from_json(value: typing.Any) -> TypeTag:
        if isinstance(value, dict):
            return TypeTag(StructTag.from_json(value))
        return TypeTag.from_str(value)


class StructTag:
    address: AccountAddress
    module: str
    name: str
    type_args: List[TypeTag]

    def __init__(self, address, module, name, type_args):
        self.address = address
        self.module = module
        self.name = name
        self.type_args = type_args

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructTag):
            return NotImplemented
        return (
            self.address == other.address
            and self.module == other.module
            and self.name == other.name
            and self.type_args == other.type_args
        )

    def __hash__(self) -> int:
        return hash(str(self))

    def __str__(self) -> str:
        value = f"{self.address}::{self.module}::{self.name}"
        if len(self.type_args) > 0:
            value += f"<{self.type_args[0]}"
            for type_arg in self.type_args[1:]:
                value += f", {type_arg}"
            value += ">"
        return value

    def __repr__(self):
        return self.__str__()

    @staticmethod
    def from_str(type_tag: str) -> StructTag:
        """Parse ``address::module::Name<Args...>``.

        Raises:
            ValueError: If the string does not describe a struct.
        """
        tag = TypeTag.from_str(type_tag)
        if not isinstance(tag.value, StructTag):
            raise ValueError(f"{type_tag} is not a struct type")
        return tag.value

    @staticmethod
    def from_json(value: typing.Any) -> StructTag:
        """Parse either the canonical string or the JSON struct tag form."""
        if isinstance(value, StructTag):
            return value
        if isinstance(value, str):
            return StructTag.from_str(value)
        return StructTag(
            AccountAddress.from_str_relaxed(value["address"]),
            value["module"],
            value["name"],
            [TypeTag.from_json(param) for param in value["generic_type_params"]],
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "address": str(self.address),
            "module": self.module,
            "name": self.name,
            "generic_type_params": [str(type_arg) for type_arg in self.type_args],
        }

    @staticmethod
    def _from_str_internal(type_tag: str, index: int) -> Tuple[List[TypeTag], int]:
        name = ""
        tags = []
        inner_tags: List[TypeTag] = []

        while index < len(type_tag):
            letter = type_tag[index]
            index += 1

            if letter == " ":
                continue

            if letter == "<":
                (inner_tags, index) = StructTag._from_str_internal(type_tag, index)
            elif letter == ",":
                tags.append(StructTag._tag_from_name(name, inner_tags))
                name = ""
                inner_tags = []
            elif letter == ">":
                break
            else:
                name += letter

        tags.append(StructTag._tag_from_name(name, inner_tags))
        return (tags, index)

    @staticmethod
    def _tag_from_name(name: str, inner_tags: List[TypeTag]) -> TypeTag:
        split = name.split("::")
        if len(split) == 1:
            if not inner_tags:
                return TypeTag(name)
            if name == "vector" and len(inner_tags) == 1:
                return TypeTag(f"vector<{inner_tags[0]}>")
        if len(split) != 3:
            raise ValueError(f"Invalid struct name: {name}")
        return TypeTag(
            StructTag(
                AccountAddress.from_str_relaxed(split[0]),
                split[1],
                split[2],
                inner_tags,
            )
        )


class Test(unittest.TestCase):
    def test_nested_structs(self):
        l0 = "0x0::l0::L0"
        l10 = "0x1::l10::L10"
        l20 = "0x2::l20::L20"
        l11 = "0x1::l11::L11"
        composite = f"{l0}<{l10}<{l20}>, {l11}>"
        derived = StructTag.from_str(composite)
        self.assertEqual(composite, f"{derived}")

    def test_json_form(self):
        tag = StructTag.from_json(
            {
                "address": "0x3",
                "module": "token",
                "name": "Collections",
                "generic_type_params": [],
            }
        )
        self.assertEqual(tag, StructTag.from_str("0x3::token::Collections"))
        self.assertEqual(StructTag.from_json(tag.to_json()), tag)

    def test_structural_equality(self):
        collections = StructTag.from_str("0x3::token::Collections")
        self.assertNotEqual(collections, StructTag.from_str("0x4::token::Collections"))
        self.assertNotEqual(collections, StructTag.from_str("0x3::other::Collections"))
        self.assertNotEqual(
            collections, StructTag.from_str("0x3::token::Collections<u64>")
        )
        self.assertEqual(
            StructTag.from_str("0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>"),
            StructTag.from_json(
                {
                    "address": "0x1",
                    "module": "coin",
                    "name": "CoinStore",
                    "generic_type_params": ["0x1::aptos_coin::AptosCoin"],
                }
            ),
        )

    def test_primitive_arguments(self):
        tag = StructTag.from_str("0x1::table::Table<address, u64>")
        self.assertEqual(tag.type_args, [TypeTag("address"), TypeTag("u64")])
        with self.assertRaises(ValueError):
            StructTag.from_str("u64")

    def test_vector_arguments(self):
        composite = "0x1::thing::Holder<vector<u8>, vector<0x1::string::String>>"
        tag = StructTag.from_str(composite)
        self.assertEqual(str(tag), composite)
        self.assertEqual(tag.type_args[0], TypeTag("vector<u8>"))
        self.assertNotEqual(tag, StructTag.from_str("0x1::thing::Holder<vector<u64>>"))
        with self.assertRaises(ValueError):
            StructTag.from_str("0x1::thing::Holder<vector<u8, u8>>")


if __name__ == "__main__":
    unittest.main()
