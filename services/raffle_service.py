"""Draw orchestration: pool selection, exclusion, engine call and persistence."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from core import get_logger
from core.constants import Department, DrawType, RaffleDefaults
from core.exceptions import ApplicationError, ValidationError
from services.contestants import ContestantSource
from services.raffle import RandomSource, available_pool, draw, draw_uniform
from services.winner_store import Winner, WinnerLedger
from utils.performance import PerformanceMonitor

logger = get_logger(__name__)


def resolve_draw_type(value: Union[str, DrawType]) -> DrawType:
    """Parse a campaign identifier, raising :class:`ValidationError` if unknown."""
    try:
        return DrawType.parse(value)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def resolve_department(value: Optional[str]) -> Optional[str]:
    if not value or value == "all":
        return None
    try:
        return Department(value).value
    except ValueError:
        raise ValidationError(f"Unknown department: {value!r}") from None


@dataclass
class DrawResult:
    draw_type: DrawType
    requested: int
    eligible_before: int
    weighted: bool
    department: Optional[str] = None
    winners: List[Winner] = field(default_factory=list)

    @property
    def shortfall(self) -> int:
        return self.requested - len(self.winners)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "draw_type": self.draw_type.value,
            "label": self.draw_type.label,
            "requested": self.requested,
            "drawn": len(self.winners),
            "eligible_before": self.eligible_before,
            "weighted": self.weighted,
            "department": self.department,
            "winners": [w.to_dict() for w in self.winners],
        }


class RaffleService:
    """Runs draws for a campaign and records the winners.

    Draws on the same campaign are serialized so that the exclusion set read
    and the winner writes of one draw never interleave with another's.
    """

    def __init__(
        self,
        ledger: WinnerLedger,
        contestants: Optional[ContestantSource] = None,
        rng: Optional[RandomSource] = None,
        monitor: Optional[PerformanceMonitor] = None,
    ) -> None:
        self.ledger = ledger
        self.contestants = contestants or ContestantSource()
        self.rng = rng or random.Random()
        self.monitor = monitor or PerformanceMonitor()
        self._locks: Dict[DrawType, asyncio.Lock] = {}

    def _lock_for(self, draw_type: DrawType) -> asyncio.Lock:
        lock = self._locks.get(draw_type)
        if lock is None:
            lock = self._locks[draw_type] = asyncio.Lock()
        return lock

    async def eligibility(
        self,
        draw_type: Union[str, DrawType],
        department: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Pool and eligibility figures the raffle page shows before drawing."""
        campaign = resolve_draw_type(draw_type)
        dept = resolve_department(department)
        pool = self.contestants.get_pool(campaign, dept)
        excluded = await self.ledger.winner_names(campaign)
        eligible = available_pool(pool, excluded)
        return {
            "draw_type": campaign.value,
            "label": campaign.label,
            "department": dept,
            "pool_size": len(pool),
            "eligible": len(eligible),
            "winners_so_far": len(excluded),
            "total_tickets": sum(c.tickets for c in pool),
            "eligible_tickets": sum(c.tickets for c in eligible),
            "can_draw": bool(eligible),
            "contestants": [
                dict(c.to_dict(), has_won=c.name in excluded) for c in pool
            ],
        }

    async def run_draw(
        self,
        draw_type: Union[str, DrawType],
        count: int,
        department: Optional[str] = None,
        weighted: bool = True,
    ) -> DrawResult:
        """Draw up to ``count`` new winners and persist each of them.

        Raises:
            ValidationError: If the campaign, department or count is invalid
        """
        campaign = resolve_draw_type(draw_type)
        dept = resolve_department(department)
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValidationError("Number of winners must be an integer")
        if not RaffleDefaults.MIN_WINNERS_PER_DRAW <= count <= RaffleDefaults.MAX_WINNERS_PER_DRAW:
            raise ValidationError(
                f"Number of winners must be between {RaffleDefaults.MIN_WINNERS_PER_DRAW} "
                f"and {RaffleDefaults.MAX_WINNERS_PER_DRAW}"
            )

        pool = self.contestants.get_pool(campaign, dept)
        engine = draw if weighted else draw_uniform

        async with self._lock_for(campaign):
            with self.monitor.track_draw():
                excluded = await self.ledger.winner_names(campaign)
                eligible_before = len(available_pool(pool, excluded))
                selected = engine(pool, count, excluded, rng=self.rng)

                result = DrawResult(
                    draw_type=campaign,
                    requested=count,
                    eligible_before=eligible_before,
                    weighted=weighted,
                    department=dept,
                )
                for contestant in selected:
                    try:
                        result.winners.append(await self.ledger.add_winner(contestant, campaign))
                    except ApplicationError as exc:
                        recorded = ", ".join(w.name for w in result.winners) or "none"
                        logger.error(
                            f"{campaign.value} draw failed while recording {contestant.name}: {exc}. "
                            f"Already recorded: {recorded}"
                        )
                        raise

        mode = "weighted" if weighted else "uniform"
        self.monitor.record_draw(campaign.value, mode, len(result.winners))
        if result.shortfall:
            logger.info(
                f"{campaign.value} draw requested {count} winners but only "
                f"{eligible_before} were eligible"
            )
        logger.info(
            f"{mode.capitalize()} draw on {campaign.value} selected {len(result.winners)} winners"
            + (f" from {dept}" if dept else "")
        )
        return result
