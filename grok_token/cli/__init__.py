"""
grok_token.cli
--------------

Operator CLI for the token ledger (`grok-token`).

Commands:
  - deploy : construct the ledger from env/config and print (or write) the
             deployment record.
  - run    : deploy, then apply a JSON batch of calls and print the outcome.
  - call   : deploy, optionally replay a batch, then invoke one operation by
             name with positional arguments.
  - config : print the effective configuration.
  - version: print package version and git describe info.

Example:
  grok-token call transfer 0x00…01 1
  grok-token call transferFrom --caller 0xabc… 0xdef… 0xabc… 6 --batch setup.json
"""

from .main import app, main

__all__ = ["app", "main"]
