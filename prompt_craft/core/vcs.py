"""Version ledger: save, restore, tag, and delete prompt snapshots.

Versions are immutable snapshots kept newest first. The ledger is written only
through explicit saves; restore copies text back into the prompt without
touching its config.
"""

from __future__ import annotations

from functools import lru_cache

import structlog

from prompt_craft.core.errors import ConfirmationRequired, InvariantViolation, NotFoundError
from prompt_craft.core.models import Prompt, PromptVersion, SessionContext, VersionTag
from prompt_craft.db.repository import StoreRepository, get_repository

logger = structlog.get_logger()


class VersionControl:
    """Manages the version history of a single prompt at a time."""

    def __init__(self, store: StoreRepository) -> None:
        self.store = store

    def history(self, prompt_id: str) -> list[PromptVersion]:
        """Versions for a prompt, newest first."""
        return self.store.list_versions(prompt_id)

    def save_version(self, prompt: Prompt, text: str, ctx: SessionContext) -> PromptVersion:
        """Snapshot ``text`` as a new version at the front of the history.

        Raises PersistenceError without touching ``prompt`` if the store write
        fails.
        """
        version = self.store.add_version(prompt.id, text, ctx)
        prompt.versions = [version, *prompt.versions]
        logger.info("vcs.saved", prompt_id=prompt.id, version_id=version.id)
        return version

    def restore_version(self, prompt: Prompt, version_id: str) -> Prompt:
        """Make a past version's text the current text.

        The config is left as-is; callers re-parse if they need it in sync.
        """
        version = self._require(prompt, version_id)
        prompt.system_prompt = version.prompt
        logger.info("vcs.restored", prompt_id=prompt.id, version_id=version_id)
        return prompt

    def tag_version(
        self, prompt: Prompt, version_id: str, tag: VersionTag | None
    ) -> PromptVersion:
        """Set or clear a version's label. Text and timestamp stay as they were."""
        version = self._require(prompt, version_id)
        self.store.tag_version(version_id, tag)
        tagged = version.model_copy(update={"tag": tag})
        prompt.versions = [tagged if v.id == version_id else v for v in prompt.versions]
        logger.info("vcs.tagged", prompt_id=prompt.id, version_id=version_id, tag=tag)
        return tagged

    def delete_version(
        self, prompt: Prompt, version_id: str, confirmed: bool = False
    ) -> PromptVersion | None:
        """Delete one version and return the new representative (the newest left).

        The last remaining version can never be deleted.
        """
        if len(prompt.versions) <= 1:
            raise InvariantViolation("Cannot delete the only remaining version of a prompt.")
        self._require(prompt, version_id)
        if not confirmed:
            raise ConfirmationRequired("Deleting a version must be confirmed.")

        self.store.delete_version(version_id)
        prompt.versions = [v for v in prompt.versions if v.id != version_id]
        logger.info("vcs.deleted", prompt_id=prompt.id, version_id=version_id)
        return prompt.versions[0] if prompt.versions else None

    @staticmethod
    def _require(prompt: Prompt, version_id: str) -> PromptVersion:
        version = prompt.find_version(version_id)
        if version is None:
            raise NotFoundError(f"Version '{version_id}' not found.")
        return version


@lru_cache
def get_vcs() -> VersionControl:
    """Get cached VCS instance."""
    return VersionControl(get_repository())
