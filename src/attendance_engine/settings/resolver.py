from __future__ import annotations

from dataclasses import fields
from typing import Optional

from .model import CompanyOverrides, CompanySettings, ResolvedSettings


def resolve_settings(global_settings: CompanySettings, overrides: Optional[CompanyOverrides] = None) -> ResolvedSettings:
    """Merge company overrides over the global settings.

    Any override field that is not None wins; everything else falls back to the
    global value.
    """

    values = {f.name: getattr(global_settings, f.name) for f in fields(CompanySettings)}
    company_id = None
    if overrides is not None:
        company_id = overrides.company_id
        for name in values:
            value = getattr(overrides, name)
            if value is not None:
                values[name] = value
    return ResolvedSettings(company_id=company_id, **values)
