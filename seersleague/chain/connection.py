"""
Ledger connection module using web3's async client.

Provides connection management, health checks, and ledger access.
"""

import asyncio

import structlog
from web3 import AsyncHTTPProvider, AsyncWeb3

from seersleague.chain.ledger import ContractLedger
from seersleague.config.settings import get_settings

logger = structlog.get_logger(__name__)


class LedgerConnection:
    """
    Manages the AsyncWeb3 client lifecycle for the Base RPC endpoint.

    Usage:
        conn = LedgerConnection()
        await conn.connect()
        ledger = conn.ledger
        # ... use ledger
        await conn.disconnect()

    Or as context manager:
        async with LedgerConnection() as ledger:
            # ... use ledger
    """

    def __init__(self) -> None:
        self.settings = get_settings()
        self._web3: AsyncWeb3 | None = None
        self._ledger: ContractLedger | None = None
        self._lock = asyncio.Lock()

    @property
    def web3(self) -> AsyncWeb3:
        """Get the AsyncWeb3 client."""
        if self._web3 is None:
            raise RuntimeError("Ledger not connected. Call connect() first.")
        return self._web3

    @property
    def ledger(self) -> ContractLedger:
        """Get the contract ledger adapter."""
        if self._ledger is None:
            raise RuntimeError("Ledger not connected. Call connect() first.")
        return self._ledger

    @property
    def is_connected(self) -> bool:
        return self._web3 is not None

    async def connect(self) -> None:
        """
        Create the RPC client and the contract adapter.

        No request is made here; the first read establishes the HTTP session.
        """
        async with self._lock:
            if self._web3 is not None:
                logger.debug("Already connected to ledger")
                return

            chain_settings = self.settings.chain
            logger.info(
                "Connecting to ledger",
                rpc_url=chain_settings.rpc_url,
                contract=chain_settings.contract_address,
            )

            self._web3 = AsyncWeb3(AsyncHTTPProvider(chain_settings.rpc_url))
            self._ledger = ContractLedger(self._web3, chain_settings)

    async def disconnect(self) -> None:
        """Close the provider's HTTP session."""
        async with self._lock:
            if self._web3 is None:
                logger.debug("No active ledger connection to close")
                return

            logger.info("Disconnecting from ledger")
            await self._web3.provider.disconnect()
            self._web3 = None
            self._ledger = None

    async def health_check(self) -> dict:
        """
        Perform a health check against the RPC endpoint.

        Returns:
            dict with status, chain id, tip and latency information
        """
        try:
            if self._web3 is None:
                return {
                    "status": "disconnected",
                    "healthy": False,
                    "error": "No active connection",
                }

            timeout = self.settings.chain.request_timeout_seconds
            loop = asyncio.get_running_loop()
            start = loop.time()
            chain_id = await asyncio.wait_for(self._web3.eth.chain_id, timeout=timeout)
            latency_ms = (loop.time() - start) * 1000
            tip = await asyncio.wait_for(self._web3.eth.block_number, timeout=timeout)

            expected = self.settings.chain.chain_id
            return {
                "status": "connected" if chain_id == expected else "wrong_chain",
                "healthy": chain_id == expected,
                "latency_ms": round(latency_ms, 2),
                "chain_id": chain_id,
                "block_number": tip,
            }

        except Exception as e:
            logger.error("Ledger health check failed", error=str(e))
            return {
                "status": "error",
                "healthy": False,
                "error": str(e),
            }

    async def __aenter__(self) -> ContractLedger:
        """Async context manager entry."""
        await self.connect()
        return self.ledger

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.disconnect()


# Global connection instance (singleton pattern)
_ledger_connection: LedgerConnection | None = None


async def get_connection() -> LedgerConnection:
    """Get the LedgerConnection instance, creating it if needed."""
    global _ledger_connection

    if _ledger_connection is None:
        _ledger_connection = LedgerConnection()

    return _ledger_connection


async def get_ledger() -> ContractLedger:
    """
    Get the contract ledger, connecting if necessary.

    This is the primary way to access the ledger throughout the application.
    """
    connection = await get_connection()
    if not connection.is_connected:
        await connection.connect()
    return connection.ledger


async def close_ledger() -> None:
    """
    Close the global ledger connection.

    Should be called during application shutdown.
    """
    global _ledger_connection

    if _ledger_connection is not None:
        await _ledger_connection.disconnect()
        _ledger_connection = None
