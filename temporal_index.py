# temporal_index.py
# Purpose: entity -> date -> record lookup behind the maps.
# Notes:
# - update_current_data() merges the selected date's snapshot onto each entity's
#   current slot WITHOUT clearing fields from earlier merges. An entity with no
#   snapshot for the new date keeps showing the previous date's values.

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd


@dataclass
class Entity:
    """One municipality or region."""
    name: str
    data_by_date: Dict[str, dict] = field(default_factory=dict)
    current: dict = field(default_factory=dict)


def _iso_date(value: object) -> str:
    return pd.Timestamp(value).strftime("%Y-%m-%d")


class TemporalIndex:
    """Records grouped by entity name, then by exact date string."""

    def __init__(self, records: Iterable[Mapping], key: str = "municipality"):
        self.key = key
        self.entities: Dict[str, Entity] = {}
        for row in records:
            name = row.get(key)
            if not name:
                continue
            ent = self.entities.get(name)
            if ent is None:
                ent = Entity(name=name)
                ent.current[key] = name
                if "region" in row:
                    ent.current["region"] = row["region"]
                self.entities[name] = ent
            # last write wins
            ent.data_by_date[row.get("date")] = dict(row)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, key: str = "municipality") -> "TemporalIndex":
        if df is None or df.empty:
            return cls([], key=key)
        return cls(df.to_dict(orient="records"), key=key)

    def __len__(self) -> int:
        return len(self.entities)

    def __contains__(self, name: object) -> bool:
        return name in self.entities

    def get(self, name: str) -> Optional[Entity]:
        return self.entities.get(name)

    def dates(self) -> List[str]:
        return sorted({d for e in self.entities.values() for d in e.data_by_date if d})

    def update_current_data(self, target_date: object, variable: str) -> None:
        target = _iso_date(target_date)
        for ent in self.entities.values():
            snapshot = ent.data_by_date.get(target, {})
            ent.current.update(snapshot)
            if ent.current.get(variable) is None:
                ent.current[variable] = 0

    def current_values(self, variable: str) -> Dict[str, object]:
        return {name: e.current.get(variable) for name, e in self.entities.items()}
