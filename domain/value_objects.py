"""Domain Value Objects"""
from datetime import date

from pydantic import BaseModel, model_validator


def dates_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """[a_start, a_end) and [b_start, b_end) share at least one day"""
    return a_start < b_end and b_start < a_end


class DateRange(BaseModel):
    """Value Object for a half-open stay: start inclusive, end exclusive"""
    start: date
    end: date

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def end_after_start(self):
        if not self.start < self.end:
            raise ValueError("startDate must be before endDate")
        return self

    def nights(self) -> int:
        """Number of nights in the stay"""
        return (self.end - self.start).days

    def overlaps(self, other: "DateRange") -> bool:
        return dates_overlap(self.start, self.end, other.start, other.end)

    def intersects_inclusive(self, period_start: date, period_end: date) -> bool:
        """Touches the closed period [period_start, period_end], as reports count it"""
        return self.end >= period_start and self.start <= period_end
