# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Byte-string encoding for text fields sent to the Aptos JSON API.

The token module receives every text argument (collection names, token names,
descriptions, URIs and property keys, values and types) as ``vector<u8>``.
On the JSON API a ``vector<u8>`` travels as a hex string of the UTF-8 bytes,
so ``"Alice"`` is sent as ``"416c696365"``.

Examples:
    Encoding and decoding::

        from aptos_token_sdk.encoding import decode_str, encode_str

        encoded = encode_str("Alice's Collection")
        assert decode_str(encoded) == "Alice's Collection"
"""

from __future__ import annotations

import unittest
from typing import Any, Iterable, List


def encode_str(value: str) -> str:
    """Encode text as the hex string of its UTF-8 bytes, without a 0x prefix."""
    return value.encode("utf-8").hex()


def encode_str_list(values: Iterable[str]) -> List[str]:
    return [encode_str(value) for value in values]


def decode_str(value: str) -> str:
    """Inverse of encode_str. A leading 0x is accepted."""
    return bytes.fromhex(value.removeprefix("0x")).decode("utf-8")


def decode_move_string(value: Any) -> str:
    """Decode a Move string as returned by a node.

    Nodes render ``0x1::string::String`` as plain text, while older nodes
    render the struct form ``{"bytes": "0x..."}``.

    Raises:
        ValueError: If the value has neither shape.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("bytes"), str):
        return decode_str(value["bytes"])
    raise ValueError(f"Not a Move string: {value!r}")


class Test(unittest.TestCase):
    def test_round_trip(self):
        for value in ["", "Alice", "Collection X", "üñí©ødé 🐍", "0x1"]:
            self.assertEqual(decode_str(encode_str(value)), value)

    def test_known_encoding(self):
        self.assertEqual(encode_str("Alice"), "416c696365")
        self.assertEqual(decode_str("0x416c696365"), "Alice")
        self.assertEqual(encode_str_list(["a", "b"]), ["61", "62"])

    def test_move_string(self):
        self.assertEqual(decode_move_string("Col"), "Col")
        self.assertEqual(decode_move_string({"bytes": "0x436f6c"}), "Col")
        with self.assertRaises(ValueError):
            decode_move_string(5)


if __name__ == "__main__":
    unittest.main()
