"""Dashboard and analytics aggregates over contestant pools and winners."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from core.constants import Department, DrawType, RaffleDefaults
from services.contestants import ContestantSource
from services.winner_store import Winner, sort_newest_first


@dataclass
class DepartmentStats:
    """Contestant and winner counts for one department across both campaigns."""
    department: str
    total_70: int
    total_80: int
    winners_70: int
    winners_80: int
    winners: int
    total: int
    percentage: int


@dataclass
class CampaignOverview:
    draw_type: str
    label: str
    contestants: int
    total_tickets: int
    winners: int


class AnalyticsService:
    """Aggregations behind the dashboard, winners and analytics views.

    All methods are pure functions of the contestant datasets and the winner
    list handed in; nothing here touches storage.
    """

    def __init__(self, contestants: Optional[ContestantSource] = None) -> None:
        self.contestants = contestants or ContestantSource()

    @staticmethod
    def _count(winners: Iterable[Winner], department: Optional[str] = None,
               draw_type: Optional[DrawType] = None) -> int:
        return sum(
            1 for w in winners
            if (department is None or w.department == department)
            and (draw_type is None or w.draw_type == draw_type)
        )

    def department_breakdown(self, winners: List[Winner]) -> List[DepartmentStats]:
        breakdown = []
        for department in Department:
            dept = department.value
            total_70 = len(self.contestants.get_contestants_by_department(dept, DrawType.DISCOVERY_70))
            total_80 = len(self.contestants.get_contestants_by_department(dept, DrawType.DISCOVERY_80))
            dept_winners = self._count(winners, dept)
            total = total_70 + total_80
            breakdown.append(DepartmentStats(
                department=dept,
                total_70=total_70,
                total_80=total_80,
                winners_70=self._count(winners, dept, DrawType.DISCOVERY_70),
                winners_80=self._count(winners, dept, DrawType.DISCOVERY_80),
                winners=dept_winners,
                total=total,
                percentage=round(dept_winners / total * 100) if total else 0,
            ))
        return breakdown

    def campaign_chart(self, winners: List[Winner], draw_type: DrawType) -> Dict[str, Any]:
        """Winners per department for one campaign, shaped for a bar chart."""
        return {
            "draw_type": draw_type.value,
            "label": draw_type.label,
            "labels": [d.short_name for d in Department],
            "data": [self._count(winners, d.value, draw_type) for d in Department],
        }

    def top_department(self, winners: List[Winner]) -> Dict[str, Any]:
        """Department with the most winners; the first listed wins ties."""
        best = max(self.department_breakdown(winners), key=lambda s: s.winners)
        return {"department": best.department, "winners": best.winners}

    def winners_by_department(self, winners: List[Winner]) -> Dict[str, Dict[str, int]]:
        return {
            d.value: {
                "total": self._count(winners, d.value),
                DrawType.DISCOVERY_70.value: self._count(winners, d.value, DrawType.DISCOVERY_70),
                DrawType.DISCOVERY_80.value: self._count(winners, d.value, DrawType.DISCOVERY_80),
            }
            for d in Department
        }

    def campaign_overview(self, winners: List[Winner], draw_type: DrawType) -> CampaignOverview:
        pool = self.contestants.get_all_contestants(draw_type)
        return CampaignOverview(
            draw_type=draw_type.value,
            label=draw_type.label,
            contestants=len(pool),
            total_tickets=sum(c.tickets for c in pool),
            winners=self._count(winners, draw_type=draw_type),
        )

    def overview(self, winners: List[Winner]) -> Dict[str, Any]:
        campaigns = [self.campaign_overview(winners, dt) for dt in DrawType]
        return {
            "total_contestants": sum(c.contestants for c in campaigns),
            "total_winners": len(winners),
            "campaigns": [asdict(c) for c in campaigns],
            "departments": [asdict(s) for s in self.department_breakdown(winners)],
            "recent_winners": [
                w.to_dict() for w in sort_newest_first(winners)[:RaffleDefaults.RECENT_WINNERS_LIMIT]
            ],
        }

    def analytics(self, winners: List[Winner], draw_type: DrawType) -> Dict[str, Any]:
        return {
            "departments": [asdict(s) for s in self.department_breakdown(winners)],
            "chart": self.campaign_chart(winners, draw_type),
            "top_department": self.top_department(winners),
            "winners_by_department": self.winners_by_department(winners),
        }
