"""Winner persistence: local SQLite cache, hosted REST table and the ledger over both."""

from __future__ import annotations

import abc
import asyncio
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set, Union

import aiohttp

from core import get_logger
from core.constants import DrawType, RemoteStoreDefaults
from core.exceptions import RemoteStoreError
from database.connection import OptimizedSQLitePool
from database.repositories import WinnerRepository
from services.cache import LedgerCache
from services.contestants import Contestant
from utils.performance import PerformanceMonitor

logger = get_logger(__name__)


def _parse_timestamp(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Winner:
    """Snapshot of a drawn contestant. Never mutated once recorded."""
    id: str
    name: str
    department: str
    supervisor: str
    tickets: int
    draw_type: DrawType
    draw_date: datetime

    @classmethod
    def from_contestant(
        cls,
        contestant: Contestant,
        draw_type: DrawType,
        drawn_at: Optional[datetime] = None,
    ) -> "Winner":
        return cls(
            id=uuid.uuid4().hex,
            name=contestant.name,
            department=contestant.department,
            supervisor=contestant.supervisor,
            tickets=contestant.tickets,
            draw_type=draw_type,
            draw_date=drawn_at or datetime.now(timezone.utc),
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Winner":
        """Build a winner from a stored row.

        Raises:
            ValueError: If the row is incomplete or holds unparseable values
        """
        try:
            return cls(
                id=str(row["id"]),
                name=row["name"],
                department=row["department"],
                supervisor=row["supervisor"],
                tickets=int(row["tickets"]),
                draw_type=DrawType.parse(row["draw_type"]),
                draw_date=_parse_timestamp(row["draw_date"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed winner row: {exc}") from exc

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "department": self.department,
            "supervisor": self.supervisor,
            "tickets": self.tickets,
            "draw_type": self.draw_type.value,
            "draw_date": self.draw_date.isoformat(),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.to_row()
        data["draw_type_label"] = self.draw_type.label
        return data


def sort_newest_first(winners: Iterable[Winner]) -> List[Winner]:
    return sorted(winners, key=lambda w: w.draw_date, reverse=True)


class WinnerStore(abc.ABC):
    """Storage backend for winner records.

    ``draw_type=None`` addresses both campaigns.
    """

    name = "store"

    @abc.abstractmethod
    async def list_winners(self, draw_type: Optional[DrawType] = None) -> List[Winner]:
        ...

    @abc.abstractmethod
    async def add_winner(self, winner: Winner) -> None:
        ...

    @abc.abstractmethod
    async def clear_winners(self, draw_type: Optional[DrawType] = None) -> int:
        ...

    async def winner_names(self, draw_type: DrawType) -> Set[str]:
        return {w.name for w in await self.list_winners(draw_type)}

    async def close(self) -> None:
        pass


class LocalWinnerStore(WinnerStore):
    """Winner records in the local SQLite database."""

    name = "local"

    def __init__(self, pool: Optional[OptimizedSQLitePool] = None) -> None:
        self.repository = WinnerRepository(pool)

    async def list_winners(self, draw_type: Optional[DrawType] = None) -> List[Winner]:
        rows = await self.repository.list_rows(draw_type.value if draw_type else None)
        return [Winner.from_row(row) for row in rows]

    async def add_winner(self, winner: Winner) -> None:
        await self.repository.insert(winner.to_row())

    async def clear_winners(self, draw_type: Optional[DrawType] = None) -> int:
        return await self.repository.delete(draw_type.value if draw_type else None)

    async def winner_names(self, draw_type: DrawType) -> Set[str]:
        return set(await self.repository.names(draw_type.value))


class RemoteWinnerStore(WinnerStore):
    """Winner records in a hosted PostgREST table (Supabase wire format).

    Every failure, transport or payload, surfaces as :class:`RemoteStoreError`.
    """

    name = "remote"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = RemoteStoreDefaults.TABLE,
        timeout: float = RemoteStoreDefaults.TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.endpoint = f"{base_url.rstrip('/')}{RemoteStoreDefaults.REST_PREFIX}/{table}"
        self.api_key = api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def _request(self, method: str, params: Dict[str, str], payload: Any = None) -> Any:
        session = self._get_session()
        headers = self.headers
        if method == "POST":
            headers["Prefer"] = "return=minimal"
        try:
            async with session.request(
                method, self.endpoint, params=params, json=payload, headers=headers
            ) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise RemoteStoreError(
                        f"{method} {self.endpoint} failed with {response.status}: {body[:200]}"
                    )
                if method == "GET":
                    return await response.json(content_type=None)
                return None
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RemoteStoreError(f"{method} {self.endpoint} unreachable: {exc}") from exc
        except ValueError as exc:
            raise RemoteStoreError(f"{method} {self.endpoint} returned invalid JSON: {exc}") from exc

    async def list_winners(self, draw_type: Optional[DrawType] = None) -> List[Winner]:
        params = {"select": "*", "order": "draw_date.desc"}
        if draw_type:
            params["draw_type"] = f"eq.{draw_type.value}"
        rows = await self._request("GET", params)
        if not isinstance(rows, list):
            raise RemoteStoreError("Remote winner listing is not a JSON array")
        try:
            return [Winner.from_row(row) for row in rows]
        except ValueError as exc:
            raise RemoteStoreError(str(exc)) from exc

    async def add_winner(self, winner: Winner) -> None:
        await self._request("POST", {}, winner.to_row())

    async def clear_winners(self, draw_type: Optional[DrawType] = None) -> int:
        # PostgREST refuses unfiltered deletes; "id not equal to empty" matches every row
        params = {"draw_type": f"eq.{draw_type.value}"} if draw_type else {"id": "neq."}
        await self._request("DELETE", params)
        return 0

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()


class WinnerLedger:
    """Single entry point for winner persistence.

    Reads prefer the remote store and fall back to the local cache when it
    fails. Writes always land in the local cache first and are mirrored to
    the remote store best-effort. Remote failures are logged, never raised.
    """

    def __init__(
        self,
        local: WinnerStore,
        remote: Optional[WinnerStore] = None,
        cache: Optional[LedgerCache] = None,
        monitor: Optional[PerformanceMonitor] = None,
    ) -> None:
        self.local = local
        self.remote = remote
        self.cache = cache or LedgerCache()
        self.monitor = monitor or PerformanceMonitor()

    @property
    def active_backend(self) -> str:
        return self.remote.name if self.remote else self.local.name

    def _fallback(self, operation: str, exc: Exception) -> None:
        logger.warning(f"Remote winner store failed during {operation}, using local cache: {exc}")
        logger.debug("Remote failure details", exc_info=exc)
        self.monitor.record_fallback(operation)

    async def _load(self, draw_type: Optional[DrawType]) -> List[Winner]:
        if self.remote is not None:
            try:
                return sort_newest_first(await self.remote.list_winners(draw_type))
            except RemoteStoreError as exc:
                self._fallback("list", exc)
        return sort_newest_first(await self.local.list_winners(draw_type))

    async def list_winners(self, draw_type: Optional[Union[str, DrawType]] = None) -> List[Winner]:
        """Winners of one campaign, or both merged, newest first."""
        campaign = DrawType.parse(draw_type) if draw_type else None
        key = f"winners:{campaign.value if campaign else 'all'}"
        winners = await self.cache.get_or_set(key, lambda: self._load(campaign))
        return list(winners)

    async def winner_names(self, draw_type: Union[str, DrawType]) -> Set[str]:
        """Exclusion set for the next draw of ``draw_type``.

        Read straight from the stores, never from the read cache. Local rows
        always count, so winners whose remote mirror failed are excluded too.
        """
        campaign = DrawType.parse(draw_type)
        names = await self.local.winner_names(campaign)
        if self.remote is not None:
            try:
                names |= await self.remote.winner_names(campaign)
            except RemoteStoreError as exc:
                self._fallback("names", exc)
        return names

    async def add_winner(self, contestant: Contestant, draw_type: Union[str, DrawType]) -> Winner:
        """Record ``contestant`` as a winner with a fresh id and timestamp."""
        winner = Winner.from_contestant(contestant, DrawType.parse(draw_type))
        try:
            await self.local.add_winner(winner)
            if self.remote is not None:
                try:
                    await self.remote.add_winner(winner)
                except RemoteStoreError as exc:
                    self._fallback("add", exc)
        finally:
            self.cache.invalidate_pattern("winners:")

        logger.info(f"Recorded winner {winner.name} ({winner.department}) for {winner.draw_type.value}")
        return winner

    async def clear_winners(self, draw_type: Optional[Union[str, DrawType]] = None) -> int:
        """Delete a campaign's winners, or every winner when no campaign is given.

        Returns:
            Number of local rows removed
        """
        campaign = DrawType.parse(draw_type) if draw_type else None
        try:
            removed = await self.local.clear_winners(campaign)
            if self.remote is not None:
                try:
                    await self.remote.clear_winners(campaign)
                except RemoteStoreError as exc:
                    self._fallback("clear", exc)
        finally:
            self.cache.invalidate_pattern("winners:")

        logger.info(f"Cleared {removed} winners for {campaign.value if campaign else 'all campaigns'}")
        return removed

    async def close(self) -> None:
        if self.remote is not None:
            await self.remote.close()
        await self.local.close()
