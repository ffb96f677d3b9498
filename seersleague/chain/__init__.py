"""
Ledger access layer.

Provides the SeersLeague contract ABI, the read interface the services
depend on, and its web3 implementation.
"""

from seersleague.chain.connection import LedgerConnection, close_ledger, get_connection, get_ledger
from seersleague.chain.errors import LedgerError, UpstreamUnavailableError
from seersleague.chain.ledger import ContractLedger, LedgerReader, NameResolver

__all__ = [
    "LedgerConnection",
    "get_connection",
    "get_ledger",
    "close_ledger",
    "LedgerError",
    "UpstreamUnavailableError",
    "ContractLedger",
    "LedgerReader",
    "NameResolver",
]
