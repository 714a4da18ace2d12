"""Profile service - generation quota and travel preferences of the caller."""

import logging
from uuid import UUID

from backend.app.config import Settings, get_settings
from backend.app.db.repositories import PlanRepository
from backend.app.models.plan import Profile, UpdateProfileCommand

logger = logging.getLogger(__name__)


class ProfileService:
    """Reads and edits the caller's profile.

    Profiles are provisioned with the default generation limit on first use,
    so reading one never fails for a known caller. The quota itself is only
    changed by generation.
    """

    def __init__(self, repository: PlanRepository, settings: Settings | None = None) -> None:
        self.repository = repository
        self.settings = settings or get_settings()

    def get_profile(self, user_id: UUID) -> Profile:
        return self.repository.ensure_profile(user_id, self.settings.default_generations_limit)

    def update_profile(self, user_id: UUID, command: UpdateProfileCommand) -> Profile:
        """Replace the preferences and/or travel pace that feed generation prompts."""
        self.repository.ensure_profile(user_id, self.settings.default_generations_limit)
        changes = command.model_dump(exclude_unset=True, exclude_none=True)
        profile = self.repository.update_profile(user_id, changes)
        logger.info(f"Updated profile of user {user_id} ({', '.join(sorted(changes))})")
        return profile
