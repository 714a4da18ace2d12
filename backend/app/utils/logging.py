"""Structured logging for plan generation."""

import logging
from typing import Any
from uuid import UUID

logger = logging.getLogger(__name__)


class StructuredGenerationLogger:
    """Structured logger for generation outcomes."""

    def log_outcome(
        self,
        plan_id: UUID,
        user_id: UUID,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
        remaining: int | None = None,
    ) -> None:
        """Log a generation attempt with structured data."""
        log_data: dict[str, Any] = {
            "plan_id": str(plan_id),
            "user_id": str(user_id),
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason
        if remaining is not None:
            log_data["generations_remaining"] = remaining

        log_msg = f"Plan generation: {plan_id} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
