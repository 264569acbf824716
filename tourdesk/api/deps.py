"""
FastAPI dependencies for tenant isolation and database access.

Authentication happens upstream: the gateway forwards the caller's tenant in
the X-Tenant-ID header, and every query below is scoped to it.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.database import get_db
from tourdesk.models.tenant import Tenant


async def get_tenant_id(
    db: Annotated[AsyncSession, Depends(get_db)],
    x_tenant_id: Annotated[Optional[str], Header()] = None,
) -> uuid.UUID:
    """
    Resolve the active tenant from the X-Tenant-ID header.
    """
    if not x_tenant_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Tenant-ID header",
        )

    try:
        tenant_id = uuid.UUID(x_tenant_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Tenant-ID must be a UUID",
        )

    result = await db.execute(
        select(Tenant.id).where(Tenant.id == tenant_id, Tenant.is_active == True)  # noqa: E712
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unknown or inactive tenant",
        )

    return tenant_id


# Type aliases for dependency injection
TenantId = Annotated[uuid.UUID, Depends(get_tenant_id)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
