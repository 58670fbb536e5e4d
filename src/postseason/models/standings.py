"""Regular-season standings as consumed by the postseason."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TeamStandingsRef(BaseModel):
    """A team's final regular-season position within its conference.

    Immutable once the tournament begins.
    """

    model_config = ConfigDict(frozen=True)

    team_id: str = Field(min_length=1)
    seed: int = Field(ge=1, le=15)
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    team_name: str = ""
    conference: str = ""

    @property
    def win_pct(self) -> float:
        games = self.wins + self.losses
        return self.wins / games if games else 0.0

    @property
    def record(self) -> str:
        return f"{self.wins}-{self.losses}"
