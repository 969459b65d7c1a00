from __future__ import annotations

from dataclasses import replace

from ..core.exceptions import ValidationError
from ..plans.model import WeekInfo
from ..sync.school_store import SchoolStore
from .model import SchoolSettings


class SettingsService:
    def __init__(self, store: SchoolStore):
        self._store = store

    def get_settings(self) -> SchoolSettings:
        return self._store.settings.get()

    def update_settings(self, changes: dict) -> SchoolSettings:
        """Apply a partial update given in wire keys (``schoolName``, ``logoUrl``...)."""

        values = {}
        for key, value in (changes or {}).items():
            attr = SchoolSettings.field_for(key)
            if attr is None:
                raise ValidationError(f"Unknown setting: {key}")
            values[attr] = "" if value is None else str(value)

        updated = replace(self.get_settings(), **values)
        self._store.settings.save(updated)
        return updated

    def get_week(self) -> WeekInfo:
        return self._store.week.get()

    def update_week(self, changes: dict) -> WeekInfo:
        current = self.get_week().to_dict()
        unknown = set(changes or {}) - set(current)
        if unknown:
            raise ValidationError(f"Unknown week fields: {', '.join(sorted(unknown))}")
        current.update({k: "" if v is None else str(v) for k, v in (changes or {}).items()})
        week = WeekInfo.from_dict(current)
        self._store.week.save(week)
        return week
