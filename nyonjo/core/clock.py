from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current UTC time; timestamp columns reject naive values."""
    return datetime.now(timezone.utc)
