"""Append-only JSON-lines audit log."""

from __future__ import annotations

import json
from pathlib import Path

from storeorders.domain.exceptions import PersistenceFailure
from storeorders.domain.model.audit import AuditEntry
from storeorders.domain.repository.audit_log import AuditLog


class JsonLinesAuditLog(AuditLog):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    def append(self, entry: AuditEntry) -> None:
        line = json.dumps(
            {
                "actor_id": entry.actor_id,
                "actor_name": entry.actor_name,
                "action": entry.action,
                "target": entry.target,
                "description": entry.description,
                "timestamp": entry.timestamp.isoformat(),
            },
            ensure_ascii=False,
        )
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with self._file_path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except OSError as exc:
            raise PersistenceFailure(f"Could not append to {self._file_path.name}") from exc
