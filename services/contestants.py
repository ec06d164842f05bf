"""Contestant pools loaded from the fixed per-campaign datasets."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from cachetools import LRUCache, cached

from core import get_logger
from core.constants import DATASET_FILES, DEFAULT_DATA_DIR, Department, DrawType
from core.exceptions import DataIntegrityError, ValidationError

logger = get_logger(__name__)


_REQUIRED_FIELDS = ("name", "department", "supervisor", "tickets")


@dataclass(frozen=True)
class Contestant:
    """A raffle entrant.

    ``tickets`` is the relative draw weight and is always a positive integer
    once the record has passed :func:`parse_contestant`.
    """
    name: str
    department: str
    supervisor: str
    tickets: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "department": self.department,
            "supervisor": self.supervisor,
            "tickets": self.tickets,
        }


def parse_contestant(record: Dict[str, Any]) -> Contestant:
    """Build a contestant from a raw dataset record.

    Raises:
        DataIntegrityError: If a field is missing or tickets are not a positive integer
    """
    missing = [field for field in _REQUIRED_FIELDS if field not in record]
    if missing:
        raise DataIntegrityError(f"Contestant record missing fields: {', '.join(missing)}")

    tickets = record["tickets"]
    # bool is an int subclass; reject it explicitly
    if isinstance(tickets, bool) or not isinstance(tickets, int) or tickets < 1:
        raise DataIntegrityError(
            f"Contestant {record['name']!r} has invalid ticket count: {tickets!r}"
        )

    name = str(record["name"]).strip()
    if not name:
        raise DataIntegrityError("Contestant name must not be empty")

    return Contestant(
        name=name,
        department=str(record["department"]),
        supervisor=str(record["supervisor"]),
        tickets=tickets,
    )


@cached(cache=LRUCache(maxsize=8))
def _load_pool(draw_type: DrawType, data_dir: Path) -> Tuple[Contestant, ...]:
    path = data_dir / DATASET_FILES[draw_type]
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise DataIntegrityError(f"Contestant dataset not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise DataIntegrityError(f"Contestant dataset {path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, list):
        raise DataIntegrityError(f"Contestant dataset {path} must be a JSON array")

    pool = tuple(parse_contestant(record) for record in raw)

    seen = set()
    for contestant in pool:
        if contestant.name in seen:
            raise DataIntegrityError(
                f"Duplicate contestant name {contestant.name!r} in {draw_type.value}"
            )
        seen.add(contestant.name)

    logger.info(f"Loaded {len(pool)} contestants for {draw_type.value} from {path.name}")
    return pool


def load_contestants(
    draw_type: Union[str, DrawType],
    data_dir: Optional[Union[str, Path]] = None,
) -> List[Contestant]:
    """Load the ordered contestant pool of a campaign.

    Args:
        draw_type: Campaign identifier
        data_dir: Directory holding the datasets; defaults to the bundled ``data/``

    Returns:
        A fresh list in dataset order

    Raises:
        ValidationError: If the campaign is unknown
        DataIntegrityError: If the dataset is missing or malformed
    """
    try:
        campaign = DrawType.parse(draw_type)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    directory = Path(data_dir).resolve() if data_dir else DEFAULT_DATA_DIR
    return list(_load_pool(campaign, directory))


class ContestantSource:
    """Maps a campaign to its contestant pool."""

    def __init__(self, data_dir: Optional[Union[str, Path]] = None) -> None:
        self.data_dir = data_dir

    def get_all_contestants(self, draw_type: Union[str, DrawType]) -> List[Contestant]:
        return load_contestants(draw_type, self.data_dir)

    def get_contestants_by_department(
        self,
        department: Union[str, Department],
        draw_type: Union[str, DrawType],
    ) -> List[Contestant]:
        dept = department.value if isinstance(department, Department) else department
        return [c for c in self.get_all_contestants(draw_type) if c.department == dept]

    def get_pool(
        self,
        draw_type: Union[str, DrawType],
        department: Optional[str] = None,
    ) -> List[Contestant]:
        """Return the campaign pool, optionally narrowed to one department."""
        if department:
            return self.get_contestants_by_department(department, draw_type)
        return self.get_all_contestants(draw_type)
