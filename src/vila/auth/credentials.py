"""Credential lookup for authenticators and client configuration.

A credential is taken from the first source that has it:

1. Explicitly provided value
2. Environment variable (including values loaded from a .env file)
3. Default value

Example:
    ```python
    from vila.auth import BearerAuth, CredentialResolver

    resolver = CredentialResolver()
    auth = BearerAuth(resolver.resolve(env_var_name="MY_API_TOKEN", required=True))

    # Or read the secret from a file whose path may come from the environment
    token = resolver.resolve_from_file(env_var_name="MY_API_TOKEN_FILE", required=True)
    ```

Resolved secrets are never logged; only where they came from is.
"""

import logging
import os
from pathlib import Path
from threading import Lock

import dotenv

from vila.auth.exceptions import CredentialFileError, CredentialNotFoundError

logger = logging.getLogger(__name__)

MASK = "***"


def _expand(path: str | Path) -> Path:
    return Path(os.path.expanduser(os.path.expandvars(str(path))))


class CredentialResolver:
    """Resolve secrets from explicit values, the environment and .env files.

    Args:
        dotenv_path: Path to a .env file. None lets python-dotenv search
            the parent directories.
        load_dotenv: Set to False to skip .env loading entirely.
    """

    def __init__(self, dotenv_path: str | None = None, load_dotenv: bool = True):
        self._dotenv_path = dotenv_path
        self._dotenv_loaded = False
        self._dotenv_lock = Lock()

        if load_dotenv:
            self._ensure_dotenv_loaded()

    def _ensure_dotenv_loaded(self) -> None:
        """Load the .env file once, even when the resolver is shared between threads."""
        with self._dotenv_lock:
            if self._dotenv_loaded:
                return
            self._dotenv_loaded = True
            try:
                found = dotenv.load_dotenv(dotenv_path=self._dotenv_path)
            except Exception as e:
                # Explicit values and real environment variables still work
                logger.warning(f"Could not load .env file {self._dotenv_path or ''}: {e}")
                return
            logger.debug(f"Loaded .env file for credentials: {found}")

    def _mask_credential(self, value: str | None) -> str:
        return "None" if value is None else MASK

    def _sources(self, value: str | None, env_var_name: str | None, default: str | None):
        yield "explicit parameter", value
        if env_var_name:
            yield f"environment variable '{env_var_name}'", os.environ.get(env_var_name)
        yield "default value", default

    def resolve(
        self,
        *,
        value: str | None = None,
        env_var_name: str | None = None,
        default: str | None = None,
        required: bool = False,
        mask_in_logs: bool = True,
    ) -> str | None:
        """Resolve a credential from the first source that provides it.

        Args:
            value: Explicit value, overrides every other source.
            env_var_name: Environment variable to consult.
            default: Used when nothing else provides a value.
            required: Raise instead of returning None when unresolved.
            mask_in_logs: Log "***" instead of the value. Disable only for
                non-sensitive settings such as usernames or URLs.

        Raises:
            CredentialNotFoundError: If required and no source has a value.
        """
        for source, candidate in self._sources(value, env_var_name, default):
            if candidate is not None:
                shown = self._mask_credential(candidate) if mask_in_logs else candidate
                logger.debug(f"Resolved credential from {source}: {shown}")
                return candidate

        if required:
            checked = f" (checked env var: {env_var_name})" if env_var_name else ""
            raise CredentialNotFoundError(f"Required credential not found{checked}", env_var_name=env_var_name)
        return None

    def resolve_from_file(
        self,
        *,
        file_path: str | Path | None = None,
        env_var_name: str | None = None,
        required: bool = False,
    ) -> str | None:
        """Read a credential from a file.

        The path may be given directly or through ``env_var_name``; ``~`` and
        ``$VAR`` are expanded and surrounding whitespace is stripped from the
        content. Optional lookups return None for missing or unreadable files.

        Raises:
            CredentialFileError: If required and the file cannot be read.
        """
        if file_path is None and env_var_name:
            file_path = self.resolve(env_var_name=env_var_name, mask_in_logs=False)

        if file_path is None:
            if not required:
                return None
            unset = f" (env var '{env_var_name}' not set)" if env_var_name else ""
            raise CredentialFileError(f"No file path provided for credential resolution{unset}")

        path = _expand(file_path)
        try:
            secret = path.read_text().strip()
        except OSError as e:
            if isinstance(e, FileNotFoundError):
                reason = f"Credential file not found: {path}"
            elif isinstance(e, PermissionError):
                reason = f"Permission denied reading credential file: {path}"
            else:
                reason = f"Error reading credential file {path}: {e}"
            if required:
                raise CredentialFileError(reason) from e
            logger.warning(reason)
            return None

        logger.debug(f"Resolved credential from file {path}: {MASK}")
        return secret
