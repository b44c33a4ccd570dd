from .events import MESSAGE_FIELDS, CanonicalMessage, RawEvent

__all__ = ["MESSAGE_FIELDS", "CanonicalMessage", "RawEvent"]
