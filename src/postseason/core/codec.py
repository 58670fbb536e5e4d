"""Snapshot codec — persisting and restoring postseason state.

A snapshot is a pure data tree (no back-references) so it can be written as
JSON or YAML and read back into an identical bracket. Loading re-runs model
validation, so a snapshot whose series win counts disagree with its games is
rejected with ``pydantic.ValidationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, model_validator

from postseason.models.bracket import PlayoffBracket
from postseason.models.constants import PlayoffPhase

SNAPSHOT_VERSION = 1


class PlayoffSaveData(BaseModel):
    """Everything needed to resume a postseason exactly where it stopped."""

    version: int = SNAPSHOT_VERSION
    season: int
    is_active: bool
    current_phase: PlayoffPhase
    bracket: PlayoffBracket

    @model_validator(mode="after")
    def _check_phase(self) -> PlayoffSaveData:
        if self.current_phase != self.bracket.current_phase:
            msg = (
                f"Snapshot phase {self.current_phase.value} does not match "
                f"bracket phase {self.bracket.current_phase.value}"
            )
            raise ValueError(msg)
        if self.season != self.bracket.season:
            raise ValueError("Snapshot season does not match bracket season")
        return self


def dump_snapshot(data: PlayoffSaveData) -> dict[str, Any]:
    """Convert a snapshot to JSON-ready primitives."""
    return data.model_dump(mode="json")


def load_snapshot(raw: dict[str, Any]) -> PlayoffSaveData:
    """Rebuild a snapshot from primitives, validating every invariant on the way."""
    return PlayoffSaveData.model_validate(raw)


def snapshot_to_json(data: PlayoffSaveData, indent: int | None = None) -> str:
    return data.model_dump_json(indent=indent)


def snapshot_from_json(text: str) -> PlayoffSaveData:
    return PlayoffSaveData.model_validate_json(text)


def save_snapshot_yaml(data: PlayoffSaveData, path: Path) -> None:
    """Save a snapshot to YAML."""
    with open(path, "w") as f:
        yaml.safe_dump(dump_snapshot(data), f, default_flow_style=False, sort_keys=False)


def load_snapshot_yaml(path: Path) -> PlayoffSaveData:
    """Load a snapshot from YAML."""
    with open(path) as f:
        raw = yaml.safe_load(f)
    return load_snapshot(raw)
