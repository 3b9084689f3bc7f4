"""Best-effort audit recording shared by the use cases."""

from __future__ import annotations

import logging

from storeorders.domain.exceptions import PersistenceFailure
from storeorders.domain.model.audit import Actor, AuditEntry
from storeorders.domain.repository.audit_log import AuditLog

logger = logging.getLogger(__name__)


def record(
    audit_log: AuditLog | None,
    actor: Actor,
    action: str,
    target: str,
    description: str,
) -> None:
    """Append an audit entry; a failing sink is logged, never raised."""
    entry = AuditEntry.by(actor, action, target, description)
    if audit_log is None:
        logger.info("[audit] %s | %s | %s | %s", actor.username, action, target, description)
        return
    try:
        audit_log.append(entry)
    except (PersistenceFailure, OSError) as exc:
        logger.warning(
            "audit append failed (%s); %s | %s | %s | %s",
            exc,
            actor.username,
            action,
            target,
            description,
        )
