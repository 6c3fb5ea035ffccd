import logging
from typing import Optional

from workshop.state_machine import ANONYMOUS_USER

logger = logging.getLogger(__name__)


def resolve_user_id(client) -> str:
    """Анонимный id сессии от backend; без связи - "anonymous"."""
    user_id: Optional[str] = None
    try:
        user_id = client.request_session_id()
    except OSError as exc:
        logger.warning("Anonymous sign-in failed: %s", exc)
    if not user_id:
        logger.info("Continuing as %s", ANONYMOUS_USER)
        return ANONYMOUS_USER
    return user_id
