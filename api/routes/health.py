from fastapi import APIRouter

from app.db import check_db_connection
from app.notifier import relay

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check():
    """Report database connectivity and live client count."""
    database_ok = check_db_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "services": {"database": database_ok},
        "live_clients": relay.connection_count,
    }
