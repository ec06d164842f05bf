"""Winner reporting: filtering and CSV export."""

from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, Iterator, List, Optional

from core.constants import DrawType, ExportDefaults
from services.winner_store import Winner, sort_newest_first


def filter_winners(
    winners: Iterable[Winner],
    search: str = "",
    department: Optional[str] = None,
    draw_type: Optional[DrawType] = None,
) -> List[Winner]:
    """Narrow a winner list the way the winners page does.

    ``search`` matches case-insensitively against name, department and
    supervisor. Results are newest first.
    """
    needle = search.strip().lower()
    selected = []
    for winner in winners:
        if needle and not any(
            needle in field.lower()
            for field in (winner.name, winner.department, winner.supervisor)
        ):
            continue
        if department and winner.department != department:
            continue
        if draw_type and winner.draw_type != draw_type:
            continue
        selected.append(winner)
    return sort_newest_first(selected)


def winner_csv_row(winner: Winner) -> List[str]:
    return [
        winner.name,
        winner.department,
        winner.supervisor,
        str(winner.tickets),
        winner.draw_type.label,
        winner.draw_date.strftime(ExportDefaults.DATE_FORMAT),
    ]


def iter_winners_csv(winners: Iterable[Winner]) -> Iterator[str]:
    """Yield the CSV export line by line, header first."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(ExportDefaults.HEADERS)
    for winner in winners:
        writer.writerow(winner_csv_row(winner))
        yield buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)

    # Header-only export when there are no winners
    if buffer.getvalue():
        yield buffer.getvalue()


def export_winners_csv(winners: Iterable[Winner]) -> str:
    return "".join(iter_winners_csv(winners))


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{ExportDefaults.FILENAME_PREFIX}-{today.strftime(ExportDefaults.DATE_FORMAT)}.csv"
