"""Write-only sink for audit entries."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storeorders.domain.model.audit import AuditEntry


class AuditLog(ABC):

    @abstractmethod
    def append(self, entry: AuditEntry) -> None:
        """Append one entry. Existing entries are never modified."""
