from datetime import datetime, timedelta, timezone
from typing import Dict

import jwt


def create_access_token(data: Dict, *, secret: str, algorithm: str, expires_minutes: int) -> str:
    payload = dict(data)
    payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token: str, *, secret: str, algorithm: str) -> Dict:
    """Raises jwt.PyJWTError for expired, tampered or malformed tokens."""
    return jwt.decode(token, secret, algorithms=[algorithm])
