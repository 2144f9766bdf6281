"""Connection string helpers: scheme sniffing and default names."""

from __future__ import annotations

from urllib.parse import urlparse

from dbconnect.connectors.base import ConfigurationError
from dbconnect.models import BackendKind

_MONGODB_SCHEMES = {"mongodb", "mongodb+srv"}
_POSTGRES_SCHEMES = {"postgres", "postgresql"}
_MYSQL_SCHEMES = {"mysql"}
_REDIS_SCHEMES = {"redis", "rediss", "unix"}


def url_scheme(connection_string: str) -> str:
    """Lower-cased scheme of a connection string ('' when there is none)."""
    scheme, sep, _ = connection_string.partition("://")
    if not sep:
        return ""
    return scheme.strip().lower()


def infer_backend_kind(connection_string: str) -> BackendKind:
    """Infer the native backend family from the connection string scheme."""
    scheme = url_scheme(connection_string)
    if scheme in _MONGODB_SCHEMES:
        return BackendKind.MONGODB
    base = scheme.split("+")[0]
    if base in _POSTGRES_SCHEMES:
        return BackendKind.POSTGRESQL
    if base in _MYSQL_SCHEMES:
        return BackendKind.MYSQL
    if scheme in _REDIS_SCHEMES:
        return BackendKind.REDIS
    raise ConfigurationError(f"Unsupported connection string scheme: {scheme or '(none)'}")


def default_name(connection_string: str) -> str:
    """
    Name used when a spec does not give one.

    Relational URLs use the database path, redis URLs use host plus db index,
    anything else falls back to the host.
    """
    parsed = urlparse(connection_string)
    path = parsed.path.strip("/")
    host = parsed.hostname or "localhost"
    if url_scheme(connection_string) in _REDIS_SCHEMES:
        return f"{host}/{path}" if path else host
    return path or host
