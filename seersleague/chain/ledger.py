"""
Ledger read interface and its web3 implementation.

The services depend only on the LedgerReader / NameResolver protocols;
ContractLedger is the production adapter over an AsyncWeb3 client.
Every upstream call is bounded by a timeout and failures surface as
UpstreamUnavailableError. Nothing here retries.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Protocol, TypeVar

import aiohttp
import structlog
from pydantic import ValidationError
from web3 import AsyncWeb3
from web3.contract import AsyncContract
from web3.exceptions import Web3Exception

from seersleague.chain.abi import SEERSLEAGUE_ABI
from seersleague.chain.errors import UpstreamUnavailableError
from seersleague.config.settings import ChainSettings
from seersleague.models.base import EventModel
from seersleague.models.events import (
    EventName,
    MatchRegisteredEvent,
    PredictionEvent,
    ResultEvent,
)
from seersleague.models.stats import AggregateStats

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Errors a JSON-RPC round trip can raise, including a non-JSON response body
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    Web3Exception,
    aiohttp.ClientError,
    TimeoutError,
    OSError,
    json.JSONDecodeError,
)


class LedgerReader(Protocol):
    """Read side of the ledger used by the services."""

    async def read_aggregate_stats(self, address: str) -> AggregateStats: ...

    async def get_current_height(self) -> int: ...

    async def query_events(
        self,
        event_name: str,
        filters: Mapping[str, Any] | None,
        from_height: int,
        to_height: int,
    ) -> Sequence[EventModel]: ...


class NameResolver(Protocol):
    """Optional human-readable name lookup."""

    async def resolve_name(self, address: str) -> str | None: ...


# =============================================================================
# Log decoding
# =============================================================================


def _log_position(log: Mapping[str, Any]) -> dict[str, Any]:
    tx_hash = log.get("transactionHash")
    return {
        "block_number": int(log["blockNumber"]),
        "log_index": int(log.get("logIndex") or 0),
        "transaction_hash": AsyncWeb3.to_hex(tx_hash) if tx_hash is not None else None,
    }


def decode_prediction_log(log: Mapping[str, Any]) -> PredictionEvent:
    """Decode a PredictionsSubmitted log."""
    args = log["args"]
    return PredictionEvent(
        user=args["user"],
        match_ids=tuple(int(m) for m in args["matchIds"]),
        predictions_count=int(args["predictionsCount"]),
        free_used=int(args["freeUsed"]),
        fee_paid=int(args["feePaid"]),
        **_log_position(log),
    )


def decode_result_log(log: Mapping[str, Any]) -> ResultEvent:
    """Decode a ResultRecorded log."""
    args = log["args"]
    return ResultEvent(
        user=args["user"],
        match_id=int(args["matchId"]),
        correct=bool(args["correct"]),
        **_log_position(log),
    )


def decode_match_registered_log(log: Mapping[str, Any]) -> MatchRegisteredEvent:
    """Decode a MatchRegistered log."""
    args = log["args"]
    return MatchRegisteredEvent(
        match_id=int(args["matchId"]),
        start_time=int(args["startTime"]),
        **_log_position(log),
    )


EVENT_DECODERS: dict[str, Callable[[Mapping[str, Any]], EventModel]] = {
    EventName.PREDICTIONS_SUBMITTED: decode_prediction_log,
    EventName.RESULT_RECORDED: decode_result_log,
    EventName.MATCH_REGISTERED: decode_match_registered_log,
}


# =============================================================================
# Web3 adapter
# =============================================================================


class ContractLedger:
    """
    LedgerReader and NameResolver backed by the SeersLeague contract.

    Usage:
        ledger = ContractLedger(web3, settings.chain)
        stats = await ledger.read_aggregate_stats(address)
    """

    def __init__(self, web3: AsyncWeb3, settings: ChainSettings) -> None:
        """
        Initialize the adapter.

        Args:
            web3: Connected AsyncWeb3 client
            settings: Chain settings (contract address, timeouts)
        """
        self._web3 = web3
        self._timeout = settings.request_timeout_seconds
        self._contract: AsyncContract = web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(settings.contract_address),
            abi=SEERSLEAGUE_ABI,
        )

    @property
    def contract(self) -> AsyncContract:
        """The bound contract instance."""
        return self._contract

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Await an upstream call under the timeout, wrapping transport failures."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except TRANSPORT_ERRORS as e:
            logger.warning("Upstream call failed", operation=operation, error=repr(e))
            raise UpstreamUnavailableError(operation, e) from e

    async def read_aggregate_stats(self, address: str) -> AggregateStats:
        """Read getUserStats for an address."""
        checksum = AsyncWeb3.to_checksum_address(address)
        raw = await self._call(
            "getUserStats",
            self._contract.functions.getUserStats(checksum).call(),
        )
        try:
            return AggregateStats.from_contract(raw)
        except (TypeError, ValueError) as e:
            raise UpstreamUnavailableError("getUserStats", e) from e

    async def get_current_height(self) -> int:
        """Read the current block number."""
        height = await self._call("eth_blockNumber", self._web3.eth.block_number)
        return int(height)

    async def query_events(
        self,
        event_name: str,
        filters: Mapping[str, Any] | None,
        from_height: int,
        to_height: int,
    ) -> list[EventModel]:
        """
        Fetch and decode contract events in ``[from_height, to_height]``.

        Args:
            event_name: Contract event name (see EventName)
            filters: Indexed-argument filters, e.g. {"user": address}
            from_height: First block, inclusive
            to_height: Last block, inclusive

        Returns:
            Decoded events in ledger order
        """
        decoder = EVENT_DECODERS.get(event_name)
        if decoder is None:
            raise ValueError(f"Unsupported event: {event_name}")

        argument_filters = {
            key: AsyncWeb3.to_checksum_address(value) if key == "user" else value
            for key, value in (filters or {}).items()
        }
        event = getattr(self._contract.events, event_name)

        logs = await self._call(
            f"getLogs({event_name})",
            event.get_logs(
                argument_filters=argument_filters or None,
                from_block=from_height,
                to_block=to_height,
            ),
        )

        try:
            events = [decoder(log) for log in logs]
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise UpstreamUnavailableError(f"getLogs({event_name})", e) from e

        logger.debug(
            "Fetched events",
            event_name=event_name,
            from_block=from_height,
            to_block=to_height,
            count=len(events),
        )
        return sorted(events, key=lambda e: e.ledger_position)

    async def resolve_name(self, address: str) -> str | None:
        """Reverse-resolve an address through ENS."""
        checksum = AsyncWeb3.to_checksum_address(address)
        return await self._call("ens.name", self._web3.ens.name(checksum))
