from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def normalize_database_url(url: str) -> str:
    """Turn a Supabase/Postgres connection string into an asyncpg SQLAlchemy URL.

    asyncpg does not understand libpq's ``sslmode``; it is translated to the
    ``ssl`` query argument the driver accepts.
    """
    url = (url or "").strip()
    if not url:
        return url

    parts = urlsplit(url)
    scheme = parts.scheme
    if scheme in {"postgres", "postgresql", "postgresql+psycopg", "postgresql+psycopg2"}:
        scheme = "postgresql+asyncpg"

    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    sslmode_key = next((key for key in query if key.lower() == "sslmode"), None)
    if sslmode_key is not None:
        sslmode = query.pop(sslmode_key).lower().strip()
        if "ssl" not in query:
            if sslmode in {"disable", "allow"}:
                query["ssl"] = "disable"
            else:
                query["ssl"] = "require"

    new_query = urlencode(query, doseq=True)
    return urlunsplit((scheme, parts.netloc, parts.path, new_query, parts.fragment))
