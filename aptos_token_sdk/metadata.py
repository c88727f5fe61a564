# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Client identification sent with every request to a node.
"""

import importlib.metadata as metadata
import unittest
import unittest.mock

# Package name constant for metadata lookup
PACKAGE_NAME = "aptos-token-sdk"


class Metadata:
    # HTTP header name for Aptos client identification
    APTOS_HEADER = "x-aptos-client"

    @staticmethod
    def get_aptos_header_val():
        """The header value, ``aptos-token-python-sdk/{version}``.

        Raises:
            PackageNotFoundError: If the package is not installed.
        """
        version = metadata.version(PACKAGE_NAME)
        return f"aptos-token-python-sdk/{version}"


class Test(unittest.TestCase):
    def test_header_val(self):
        with unittest.mock.patch.object(metadata, "version", return_value="1.0.0"):
            self.assertEqual(
                Metadata.get_aptos_header_val(), "aptos-token-python-sdk/1.0.0"
            )


if __name__ == "__main__":
    unittest.main()
