"""Access token lookup for the remote task service."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from ..core.exceptions import AuthenticationError
from ..core.paths import get_path_manager
from ..utils.io import safe_read_json

TOKEN_ENV = "NORG_TASK_SYNC_ACCESS_TOKEN"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Bearer token handle passed to the gateway."""

    access_token: str

    def auth_headers(self):
        return {"Authorization": f"Bearer {self.access_token}"}

    def __repr__(self) -> str:
        return "Session(access_token=***)"


def _token_from_cache(data: Any) -> Optional[str]:
    # Either a flat {"access_token": ...} object or a list of
    # {"scopes": [...], "token": {"access_token": ...}} entries.
    if isinstance(data, dict):
        token = data.get("access_token")
        if token is None and isinstance(data.get("token"), dict):
            token = data["token"].get("access_token")
        return token or None
    if isinstance(data, list):
        for entry in data:
            token = _token_from_cache(entry)
            if token:
                return token
    return None


def load_session(
    token_cache: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Session:
    """
    Build a session from the environment or the token cache.

    Args:
        token_cache: Token cache file, the one in the cache directory by default
        environ: Environment mapping, ``os.environ`` by default

    Raises:
        AuthenticationError: If no access token can be found
    """
    environ = os.environ if environ is None else environ
    token = environ.get(TOKEN_ENV)
    if token:
        logger.debug(f"Using access token from {TOKEN_ENV}")
        return Session(token)

    path = Path(token_cache) if token_cache else get_path_manager().token_cache_path
    logger.debug(f"Reading token cache: {path}")
    try:
        data = safe_read_json(str(path), default={})
    except (OSError, json.JSONDecodeError) as exc:
        raise AuthenticationError(f"could not read token cache {path}: {exc}") from exc

    token = _token_from_cache(data)
    if not token:
        raise AuthenticationError(
            f"no access token found; set {TOKEN_ENV} or provide a token cache at {path}"
        )
    return Session(token)
