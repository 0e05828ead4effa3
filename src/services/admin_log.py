"""Audit trail of admin decisions. Writing an entry never raises; failures are logged."""
import logging
from typing import Any, Dict, List, Optional

from src.data.models import AdminLog

logger = logging.getLogger(__name__)

ENTITY_TYPES = ("provider", "medical_ad", "verification", "profile_claim")


def log_admin_action(
    ctx,
    action: str,
    entity_type: str,
    entity_id: str,
    changes: Optional[Dict[str, Any]] = None,
) -> None:
    """Record an admin action by the context's user."""
    if entity_type not in ENTITY_TYPES:
        logger.warning(f"Unknown admin log entity type: {entity_type}")
    admin_id = ctx.user.id if ctx.user is not None else ""
    try:
        ctx.backend.add_admin_log(
            AdminLog(
                id="",
                admin_id=admin_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                changes=dict(changes or {}),
            )
        )
        logger.info(f"Admin {admin_id} {action} {entity_type}/{entity_id}")
    except Exception as e:
        logger.error(f"Failed to write admin log for {action} {entity_type}/{entity_id}: {e}")


def recent_admin_actions(ctx, entity_type: Optional[str] = None, limit: int = 50) -> List[AdminLog]:
    ctx.require_admin()
    return ctx.backend.list_admin_logs(entity_type)[:limit]
