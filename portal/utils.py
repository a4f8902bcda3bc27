"""Supporting utilities for reporting and exports."""
from __future__ import annotations

import csv
from datetime import date
from io import StringIO
from typing import Iterable

from .models import TimeOffRequest

EXPORT_HEADERS = ["Employee", "Type", "Start Date", "End Date", "Days", "Status", "Submitted"]


def render_requests_csv(requests: Iterable[TimeOffRequest]) -> str:
    """Render every request as one CSV row, in the fixed export column order."""
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for request_obj in requests:
        writer.writerow(
            [
                request_obj.employee_name,
                request_obj.type,
                request_obj.start_date,
                request_obj.end_date,
                request_obj.days,
                request_obj.status,
                request_obj.submitted_date,
            ]
        )
    return buffer.getvalue()


def export_filename(on: date) -> str:
    return f"time-off-report-{on.isoformat()}.csv"
