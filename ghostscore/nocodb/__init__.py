"""NocoDB collaborator: paginated table reads and row writes.

    from ghostscore.nocodb import NocoDBClient
    client = NocoDBClient.from_config(app_config, env_config)
    rows = client.fetch_all("GL701")
"""

from .client import NocoDBClient
from .exceptions import (
    NocoDBError,
    NocoDBHTTPError,
    NocoDBResponseError,
    NocoDBTimeoutError,
)

__all__ = [
    "NocoDBClient",
    "NocoDBError",
    "NocoDBHTTPError",
    "NocoDBResponseError",
    "NocoDBTimeoutError",
]
