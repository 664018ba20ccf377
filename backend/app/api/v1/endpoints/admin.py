"""
Admin API Endpoints.

Admin-only access to the audit trail.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backend.app.core.guards import require_admin
from backend.app.db.session import get_db
from backend.app.schemas.admin import AuditLogResponse
from backend.app.services.audit import get_audit_trail

router = APIRouter(tags=["Admin"])


@router.get("/audit-logs", response_model=List[AuditLogResponse])
async def list_audit_logs(
    action: Optional[str] = Query(None, description="Filter by action type"),
    target_id: Optional[str] = Query(None, description="Filter by target entity ID"),
    limit: int = Query(100, ge=1, le=500, description="Max records to return"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Audit trail, most recent first (admin-only)."""
    logs = await get_audit_trail(db, target_id=target_id, action=action, limit=limit)
    return [AuditLogResponse.model_validate(log) for log in logs]
