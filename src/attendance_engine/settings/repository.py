from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CompanyOverrides, CompanySettings


class SettingsRepository(Protocol):
    def get_global(self) -> CompanySettings:
        raise NotImplementedError

    def get_company_overrides(self, company_id: int) -> Optional[CompanyOverrides]:
        raise NotImplementedError

    def list_company_overrides(self) -> Sequence[CompanyOverrides]:
        raise NotImplementedError
