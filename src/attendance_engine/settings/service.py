from __future__ import annotations

from typing import Optional

from ..employees.model import Employee
from .model import ResolvedSettings
from .repository import SettingsRepository
from .resolver import resolve_settings


class SettingsService:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def for_company(self, company_id: Optional[int]) -> ResolvedSettings:
        global_settings = self._settings.get_global()
        overrides = self._settings.get_company_overrides(int(company_id)) if company_id is not None else None
        return resolve_settings(global_settings, overrides)

    def for_employee(self, employee: Employee) -> ResolvedSettings:
        return self.for_company(employee.company_id)

    def list_contexts(self) -> list[ResolvedSettings]:
        """Global settings first, then one entry per company with overrides."""

        global_settings = self._settings.get_global()
        contexts = [resolve_settings(global_settings)]
        for overrides in self._settings.list_company_overrides():
            contexts.append(resolve_settings(global_settings, overrides))
        return contexts
