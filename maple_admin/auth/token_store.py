"""
Token Store - Handles on-disk storage of the admin bearer token
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from ..domain.session import AdminSession

logger = logging.getLogger(__name__)


class TokenStore:
    """
    Persists the admin session in a JSON file.

    Lets a login survive between CLI invocations. The file is readable
    only by its owner.
    """

    def __init__(self, path):
        """
        Initialize TokenStore.

        Args:
            path: Location of the session JSON file.
        """
        self.path = Path(path)

    def get_session(self) -> Optional[AdminSession]:
        """
        Retrieve the stored session.

        Returns:
            AdminSession or None if nothing usable is stored
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                session = AdminSession.from_dict(json.load(f))
        except FileNotFoundError:
            logger.debug("No stored admin session")
            return None
        except (OSError, ValueError, AttributeError) as e:
            logger.error(f"Error reading stored admin session: {e}")
            return None

        if session.is_empty():
            return None
        return session

    def get_token(self) -> Optional[str]:
        session = self.get_session()
        return session.token if session else None

    def save_session(self, session: AdminSession) -> bool:
        """
        Save the session, creating the parent directory when needed.

        Returns:
            True if successful, False otherwise
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(session.to_dict(), f)
            logger.info("Admin session saved")
            return True
        except OSError as e:
            logger.error(f"Error saving admin session: {e}")
            return False

    def clear_session(self) -> bool:
        """
        Remove the stored session.

        Returns:
            True if the session is gone afterwards, False otherwise.
        """
        try:
            self.path.unlink()
            logger.info("Cleared stored admin session")
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error(f"Error clearing stored admin session: {e}")
            return False
