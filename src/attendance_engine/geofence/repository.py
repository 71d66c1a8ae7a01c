from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import GeofenceLocation


class GeofenceRepository(Protocol):
    def list_active(self, *, company_id: Optional[int] = None) -> Sequence[GeofenceLocation]:
        """Active locations for the company plus the shared ones (company_id NULL)."""

        raise NotImplementedError
