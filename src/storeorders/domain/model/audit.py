"""Audit trail entries for mutating operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class Actor:
    """Who performed an action: an admin account or the ordering customer."""

    uid: str
    username: str


@dataclass(frozen=True)
class AuditEntry:
    actor_id: str
    actor_name: str
    action: str
    target: str
    description: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def by(actor: Actor, action: str, target: str, description: str) -> AuditEntry:
        return AuditEntry(
            actor_id=actor.uid,
            actor_name=actor.username,
            action=action,
            target=target,
            description=description,
        )
