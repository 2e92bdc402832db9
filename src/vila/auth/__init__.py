"""Authentication strategies and credential resolution.

Example:
    ```python
    from vila.auth import BasicAuth, BearerAuth, HeaderAuth, QueryAuth

    BearerAuth("token")
    BasicAuth("user", "pass")
    QueryAuth([("key", "k"), ("secret", "s")])
    HeaderAuth({"X-Api-Key": "k"})
    ```
"""

from vila.auth.authenticators import (
    Authenticator,
    BasicAuth,
    BearerAuth,
    CallableAuth,
    HeaderAuth,
    NoAuth,
    QueryAuth,
)
from vila.auth.credentials import CredentialResolver
from vila.auth.exceptions import (
    CredentialError,
    CredentialFileError,
    CredentialNotFoundError,
)

__all__ = [
    "Authenticator",
    "BasicAuth",
    "BearerAuth",
    "CallableAuth",
    "CredentialError",
    "CredentialFileError",
    "CredentialNotFoundError",
    "CredentialResolver",
    "HeaderAuth",
    "NoAuth",
    "QueryAuth",
]
