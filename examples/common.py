# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Network configuration shared by the examples.

Environment Variables:
    APTOS_NODE_URL: URL of a full node serving the legacy JSON REST API at its
        root, the API that signs and accepts ``script_function_payload``
        transactions. Defaults to a local node.
    APTOS_FAUCET_URL: URL of the faucet used to fund accounts. Defaults to the
        faucet next to a local node.
    FAUCET_AUTH_TOKEN: Authentication token for faucet requests (if required)
"""

import os

# :!:>section_1
FAUCET_URL = os.getenv(
    "APTOS_FAUCET_URL",
    "http://127.0.0.1:8081",
)
FAUCET_AUTH_TOKEN = os.getenv("FAUCET_AUTH_TOKEN")
NODE_URL = os.getenv("APTOS_NODE_URL", "http://127.0.0.1:8080")
# <:!:section_1
