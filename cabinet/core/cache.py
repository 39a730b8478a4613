import redis
from .config import settings

# Redis holds revoked session ids and rate-limit counters, nothing else.
# The connection is opened lazily on first command.
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

REVOKED_SESSION_PREFIX = "revoked_session:"

# Redis dependency
def get_redis():
    """Get Redis client."""
    return redis_client

def revoke_session(client, jti: str, ttl_seconds: int) -> None:
    """Remember a logged-out session until its natural expiry."""
    client.setex(f"{REVOKED_SESSION_PREFIX}{jti}", max(ttl_seconds, 1), 1)

def is_session_revoked(client, jti: str) -> bool:
    return client.get(f"{REVOKED_SESSION_PREFIX}{jti}") is not None
