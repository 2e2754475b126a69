"""Report export"""
import json
import logging
from pathlib import Path
from typing import Union

from application.services import OccupancyReport
from domain.errors import PersistenceFailed

logger = logging.getLogger(__name__)


def export_occupancy_report(report: OccupancyReport, report_dir: Union[str, Path]) -> Path:
    """Write the report as JSON into report_dir and return the file path"""
    report_dir = Path(report_dir)
    stamp = report.generated_at.strftime("%Y%m%d_%H%M%S")
    path = report_dir / f"occupancy_{report.period_start}_{report.period_end}_{stamp}.json"

    record = {
        "reportPeriod": report.report_period,
        "totalRooms": report.total_rooms,
        "totalReservations": report.total_reservations,
        "totalGuests": report.total_guests,
        "totalPayments": report.total_payments,
        "occupancyRate": report.formatted_rate,
        "generatedAt": report.generated_at.strftime("%Y-%m-%d %H:%M:%S"),
    }

    try:
        report_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2)
    except OSError as e:
        logger.error("Failed to export report to %s: %s", path, e)
        raise PersistenceFailed(f"Failed to export report: {e}", str(path)) from e

    logger.info("Exported occupancy report to %s", path)
    return path
