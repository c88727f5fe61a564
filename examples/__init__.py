"""
Example scripts for the Aptos Token SDK.

    - simple_token.py: create a collection and a token, then hand it to another
      account with an offer and a claim
    - common.py: network configuration read from the environment

Run them as modules::

    python -m examples.simple_token
"""
