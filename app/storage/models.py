from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UploadHandle:
    """A single-use signed PUT URL scoped to one object path."""

    upload_url: str
    token: str
    path: str
    expires_at: datetime
