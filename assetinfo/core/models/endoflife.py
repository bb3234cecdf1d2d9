"""
End-of-life models — release cycle records from endoflife.date.

Several fields are "date or boolean": ``eol: false`` means the cycle
has no announced end, ``eol: true`` means it ended on an unknown date.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

CycleId = str | int
DateOrBool = date | bool
Lts = bool | str


class ReleaseCycle(BaseModel):
    """One release cycle of a product."""

    model_config = ConfigDict(populate_by_name=True)

    cycle: CycleId | None = None
    release_date: date = Field(alias="releaseDate")
    eol: DateOrBool
    latest: str
    link: str | None = None
    lts: Lts = False
    support: DateOrBool | None = None
    discontinued: DateOrBool | None = None

    def eol_date(self) -> date | None:
        """The end-of-life date, if the service published one."""
        if isinstance(self.eol, date):
            return self.eol
        return None

    def is_supported(self, today: date) -> bool:
        if isinstance(self.eol, bool):
            return not self.eol
        return self.eol > today
