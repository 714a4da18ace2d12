"""Health check endpoints.

- /health: liveness, always 200 while the process runs
- /healthz: readiness, checks the database when one is configured
"""

import json
from typing import Any

from fastapi import APIRouter, Response
from sqlalchemy import text

from backend.app.config import Settings, get_settings
from backend.app.db.engine import create_engine_from_settings, create_session_factory

router = APIRouter()


async def check_db(settings: Settings) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.database_url:
        return (True, "in_memory")

    try:
        engine = create_engine_from_settings(settings)
        session_factory = create_session_factory(engine)

        with session_factory() as session:
            session.execute(text("SELECT 1"))

        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


async def check_llm(settings: Settings) -> tuple[bool, str]:
    """Report whether the LLM provider is configured. No outbound call is made.

    Returns:
        (is_ok, status_message)
    """
    api_key = settings.openrouter_api_key
    if api_key is None or not api_key.get_secret_value():
        return (False, "not_configured")
    return (True, "configured")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | Response:
    """Readiness check.

    Returns:
        200 with component status if the database is reachable
        503 if it is not
    """
    settings = get_settings()

    db_ok, db_status = await check_db(settings)
    llm_ok, llm_status = await check_llm(settings)

    # Generation degrades without a provider key, but reads and edits still work
    response_body = {
        "status": "ok" if db_ok else "degraded",
        "components": {
            "db": db_status,
            "llm": llm_status,
        },
    }

    if not db_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
