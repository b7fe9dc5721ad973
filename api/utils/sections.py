"""
Isolation of independent sections in composite responses.
"""
from typing import Any, Callable, Optional, Tuple
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def run_section(db: Session, name: str, build: Callable[[], Any], default: Any = None) -> Tuple[Any, Optional[str]]:
    """
    Build one section of a response.

    A database error degrades the section to its default and an error
    message; the session is rolled back so sibling sections can still query.

    Returns:
        Tuple of (section value, error message). If successful, error is None.
    """
    try:
        return build(), None
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Section '{name}' unavailable: {e}")
        return default, f"Could not load {name}"
