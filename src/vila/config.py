"""Client configuration.

Example:
    ```python
    from vila import Client, ClientConfig

    # Reads MYAPI_BASE_URL, MYAPI_TOKEN (or MYAPI_USERNAME / MYAPI_PASSWORD)
    # and MYAPI_TIMEOUT from the environment or a .env file
    config = ClientConfig.from_env("MYAPI")

    async with Client.from_config(config) as client:
        ...
    ```
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from vila.auth import Authenticator, BasicAuth, BearerAuth, CredentialResolver, NoAuth

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by every request a client sends."""

    base_url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    authenticator: Authenticator = field(default_factory=NoAuth)
    timeout: float = DEFAULT_TIMEOUT
    follow_redirects: bool = True

    @classmethod
    def from_env(
        cls,
        prefix: str,
        *,
        base_url: str | None = None,
        headers: Mapping[str, str] | None = None,
        resolver: CredentialResolver | None = None,
    ) -> "ClientConfig":
        """Build a configuration from ``<PREFIX>_*`` environment variables.

        A token selects bearer auth; otherwise a username selects basic auth
        with an optional password; otherwise requests are unauthenticated.

        Raises:
            CredentialNotFoundError: If no base URL can be resolved.
            ValueError: If ``<PREFIX>_TIMEOUT`` is not a number.
        """
        resolver = resolver or CredentialResolver()
        prefix = prefix.rstrip("_").upper()

        resolved_url = resolver.resolve(
            value=base_url, env_var_name=f"{prefix}_BASE_URL", required=True, mask_in_logs=False
        )

        authenticator: Authenticator
        token = resolver.resolve(env_var_name=f"{prefix}_TOKEN")
        username = resolver.resolve(env_var_name=f"{prefix}_USERNAME", mask_in_logs=False)
        if token:
            authenticator = BearerAuth(token)
        elif username:
            authenticator = BasicAuth(username, resolver.resolve(env_var_name=f"{prefix}_PASSWORD"))
        else:
            authenticator = NoAuth()

        raw_timeout = resolver.resolve(
            env_var_name=f"{prefix}_TIMEOUT", default=str(DEFAULT_TIMEOUT), mask_in_logs=False
        )
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(f"{prefix}_TIMEOUT must be a number of seconds, got {raw_timeout!r}") from None

        return cls(
            base_url=resolved_url,
            headers=dict(headers or {}),
            authenticator=authenticator,
            timeout=timeout,
        )
