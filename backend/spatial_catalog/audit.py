from datetime import datetime, timezone
from uuid import UUID
from sqlalchemy.orm import Session
from . import models


def log_action(
    db: Session,
    user_id: str | UUID,
    action: str,
    target_type: str | None = None,
    target_id: str | UUID | None = None,
    details: dict | None = None,
):
    log = models.AuditLog(
        user_id=UUID(str(user_id)),
        action=action,
        target_type=target_type,
        target_id=UUID(str(target_id)) if target_id else None,
        details=details or {},
        created_at=datetime.now(timezone.utc),
    )
    db.add(log)
    db.commit()
    db.refresh(log)
    return log


def entry_history(db: Session, test_id: UUID, limit: int = 50):
    """Most recent audit events recorded against one catalog entry."""

    return (
        db.query(models.AuditLog)
        .filter(
            models.AuditLog.target_type == "test",
            models.AuditLog.target_id == test_id,
        )
        .order_by(models.AuditLog.created_at.desc())
        .limit(limit)
        .all()
    )
