from sqlalchemy.orm import Session
from fleet_api.models.audit_log import AuditLog


def log_action(
    db: Session,
    user_id: int | None,
    action: str,
    entity_type: str,
    entity_id: int | None = None,
    description: str | None = None,
) -> None:
    """
    Write an audit log entry.

    Args:
        db:          Active DB session (adds but does NOT commit, caller commits)
        user_id:     ID of user performing the action (None = system action)
        action:      Verb: ASSIGN, UNASSIGN, DEACTIVATE, etc.
        entity_type: Model name: "Car", "CarOperator", etc.
        entity_id:   Primary key of the affected record
        description: Human-readable description (shown in audit log UI)

    Usage:
        log_action(db, current_user.id, "ASSIGN", "Car", car.id,
                   f"Operator {operator.fullName} assigned to {car.licensePlate}")
        db.commit()
    """
    entry = AuditLog(
        userId=user_id,
        action=action,
        entityType=entity_type,
        entityId=entity_id,
        description=description,
    )
    db.add(entry)
    # Do NOT commit here, the caller commits
