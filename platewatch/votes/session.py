from __future__ import annotations

import logging
from typing import Any, MutableMapping

from pydantic import ValidationError

from .models import UserVoteRecord

logger = logging.getLogger(__name__)

# Bump the suffix when the stored shape changes; older ballots are discarded.
LOCAL_VOTES_KEY = "user_votes_v4"
_KEY_PREFIX = "user_votes_v"


def load_local_record(session: MutableMapping[str, Any]) -> UserVoteRecord:
    """Return the guest ballot stored in *session*, or an empty one."""
    for key in [k for k in session.keys() if k.startswith(_KEY_PREFIX) and k != LOCAL_VOTES_KEY]:
        logger.info("Discarding guest ballot stored under outdated key %s", key)
        del session[key]

    raw = session.get(LOCAL_VOTES_KEY)
    if not raw:
        return UserVoteRecord()
    try:
        return UserVoteRecord(**raw)
    except (TypeError, ValidationError):
        logger.info("Guest ballot could not be read, starting fresh")
        del session[LOCAL_VOTES_KEY]
        return UserVoteRecord()


def save_local_record(session: MutableMapping[str, Any], record: UserVoteRecord) -> None:
    session[LOCAL_VOTES_KEY] = record.model_dump()


def clear_local_record(session: MutableMapping[str, Any]) -> None:
    session.pop(LOCAL_VOTES_KEY, None)
