"""
LedgerGate
==========

Identity lifecycle management and transaction invocation for a
permissioned, multi-organization ledger network inspired by Hyperledger Fabric.
"""

from ledgergate.units.version import get_version, VERSION


__version__ = get_version(VERSION)

__author__ = "Nguyễn Lê Văn Dũng"

# Define what should be imported with "from ledgergate import *"
__all__ = []
