"""Library manager: template categories with name-uniqueness rules.

Every mutation is checked against the last fetched view, sent to the store,
and followed by a full refresh so the view never drifts from what the store
would accept.
"""

from __future__ import annotations

import structlog

from prompt_craft.core.editor import PromptEditor
from prompt_craft.core.errors import (
    ConfirmationRequired,
    DuplicateNameError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from prompt_craft.core.models import Library, PromptTemplate, SessionContext
from prompt_craft.db.repository import StoreRepository

logger = structlog.get_logger()


class LibraryManager:
    """View and edit the libraries visible to one session."""

    def __init__(self, store: StoreRepository, ctx: SessionContext) -> None:
        self.store = store
        self.ctx = ctx
        self.libraries: list[Library] = []
        self.selected: Library | None = None
        self.error: str | None = None

    # --- View ---

    def refresh(self) -> list[Library]:
        """Re-fetch every library and template.

        On failure the view is emptied rather than left stale, and the error
        propagates.
        """
        selected_id = self.selected.id if self.selected else None
        try:
            libraries = self.store.get_libraries(self.ctx)
        except PersistenceError as e:
            self.libraries = []
            self.selected = None
            self.error = e.message
            raise
        self.libraries = libraries
        self.error = None
        self.selected = next((lib for lib in libraries if lib.id == selected_id), None)
        if self.selected is None and libraries:
            self.selected = libraries[0]
        return libraries

    def find(self, name: str) -> Library | None:
        wanted = name.lower()
        return next((lib for lib in self.libraries if lib.name.lower() == wanted), None)

    def require(self, name: str) -> Library:
        library = self.find(name)
        if library is None:
            raise NotFoundError(f"Category '{name}' not found.")
        return library

    def select(self, name: str) -> Library:
        self.selected = self.require(name)
        return self.selected

    # --- Categories ---

    def create_category(self, name: str, team_id: str | None = None) -> Library:
        name = _require_name(name, "category")
        if self.find(name):
            raise DuplicateNameError("A category with this name already exists.")
        library = self.store.create_library(name, self.ctx, team_id=team_id)
        logger.info("library.created", library_id=library.id, team_id=team_id)
        self.refresh()
        self.selected = next(
            (lib for lib in self.libraries if lib.id == library.id), self.selected
        )
        return library

    def rename_category(self, old_name: str, new_name: str) -> None:
        new_name = _require_name(new_name, "category")
        if old_name == new_name:
            return
        library = self.require(old_name)
        clash = self.find(new_name)
        if clash is not None and clash.id != library.id:
            raise DuplicateNameError("A category with this name already exists.")
        self.store.rename_library(library.id, new_name)
        logger.info("library.renamed", library_id=library.id)
        self.refresh()

    def delete_category(self, name: str, confirmed: bool = False) -> None:
        """Delete a category and every template in it."""
        library = self.require(name)
        if not confirmed:
            raise ConfirmationRequired(
                f'Deleting category "{library.name}" and all its prompts must be confirmed.'
            )
        self.store.delete_library(library.id)
        logger.info("library.deleted", library_id=library.id, templates=len(library.templates))
        self.refresh()

    # --- Templates in the selected category ---

    def _selected(self) -> Library:
        if self.selected is None:
            raise ValidationError("Select a category first.")
        return self.selected

    def create_template(self, template: PromptTemplate) -> PromptTemplate:
        library = self._selected()
        usecase = _require_name(template.usecase, "prompt")
        if library.find_template(usecase):
            raise DuplicateNameError("A prompt with this name already exists in this category.")
        created = self.store.create_template(library.id, usecase, template.prompt, self.ctx)
        logger.info("template.created", library_id=library.id, template_id=created.id)
        self.refresh()
        return created

    def update_template(self, old_usecase: str, updated: PromptTemplate) -> None:
        """Change a template's text, and its name when it differs.

        Name and text go to the store in one update, so both apply or neither.
        """
        library = self._selected()
        current = library.find_template(old_usecase)
        if current is None:
            raise NotFoundError(f"Prompt '{old_usecase}' not found in '{library.name}'.")
        new_usecase = _require_name(updated.usecase, "prompt")

        fields = {"prompt": updated.prompt}
        if new_usecase != current.usecase:
            clash = library.find_template(new_usecase)
            if clash is not None and clash.id != current.id:
                raise DuplicateNameError(
                    "A prompt with this name already exists in this category."
                )
            fields["usecase"] = new_usecase
        self.store.update_template(current.id, fields)
        logger.info("template.updated", library_id=library.id, renamed="usecase" in fields)
        self.refresh()

    def delete_template(self, usecase: str, confirmed: bool = False) -> None:
        library = self._selected()
        current = library.find_template(usecase)
        if current is None:
            raise NotFoundError(f"Prompt '{usecase}' not found in '{library.name}'.")
        if not confirmed:
            raise ConfirmationRequired(f'Deleting prompt "{current.usecase}" must be confirmed.')
        self.store.delete_template(current.id)
        logger.info("template.deleted", library_id=library.id, template_id=current.id)
        self.refresh()

    def use_template(self, usecase: str, editor: PromptEditor) -> None:
        """Copy a template's text into the prompt being edited."""
        library = self._selected()
        template = library.find_template(usecase)
        if template is None:
            raise NotFoundError(f"Prompt '{usecase}' not found in '{library.name}'.")
        editor.use_template(template.prompt)


def _require_name(name: str, what: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError(f"A {what} name cannot be empty.")
    if "/" in name:
        raise ValidationError(f"A {what} name cannot contain \"/\".")
    return name
