"""Create, load, validate and save session notes in a record store."""

import logging
from datetime import date

from lineage.config import Config
from lineage.errors import StoreError, ValidationBlockedError
from lineage.session.model import Session
from lineage.session.parser import parse_session, serialize_session
from lineage.session.template import build_session_template
from lineage.session.validation import SessionValidationResult, evaluate_session_validation
from lineage.store.base import VaultFile, VaultStore
from lineage.utils.slugify import slugify

logger = logging.getLogger(__name__)


class SessionManager:
    """Session note lifecycle on top of a ``VaultStore``."""

    def __init__(self, store: VaultStore, config: Config | None = None):
        self.store = store
        self.config = config or Config()

    def create_session_file(self, title: str, session_date: str | None = None) -> VaultFile:
        """Write a new session note to ``<sessions_folder>/<date>-<slug>.md``.

        An existing path gets a ``-1``, ``-2``, ... suffix.
        """
        folder = self.config.sessions_folder
        if self.store.get_file(folder) is not None:
            raise StoreError(f"{folder} exists and is not a folder")
        self.store.create_folder(folder)

        day = session_date or date.today().isoformat()
        path = self._unique_path(f"{folder}/{day}-{slugify(title)}.md")
        content = build_session_template(title, session_date=day)

        file = self.store.create(path, content)
        logger.info(f"Created session {path}")
        return file

    def load_session(self, file: VaultFile | str) -> Session:
        return parse_session(self.store.read(file))

    def evaluate(self, session: Session) -> SessionValidationResult:
        return evaluate_session_validation(session, self.store)

    def validate_session(self, session: Session) -> tuple[bool, list[str]]:
        """Return ``(valid, error_texts)``; warnings never make a session invalid."""
        result = self.evaluate(session)
        return not result.blocking, [issue.text for issue in result.errors]

    def save_session(self, file: VaultFile | str, session: Session) -> None:
        """Overwrite a session note with the serialized session.

        Raises:
            ValidationBlockedError: If the session has error-level issues.
        """
        result = self.evaluate(session)
        if result.blocking:
            raise ValidationBlockedError(
                f"Session has {len(result.errors)} blocking issue(s)", result.errors
            )
        self.store.modify(file, serialize_session(session))
        logger.debug(f"Saved session {getattr(file, 'path', file)}")

    def _unique_path(self, path: str) -> str:
        if not self.store.exists(path):
            return path

        base = path[:-3] if path.endswith(".md") else path
        counter = 1
        while self.store.exists(f"{base}-{counter}.md"):
            counter += 1
        return f"{base}-{counter}.md"
