import json
from typing import Any, Optional, Type, TypeVar

from eth_utils import encode_hex

T = TypeVar("T")


def _default(value: Any) -> Any:
    """Encode the non-JSON values found in hook events."""
    if isinstance(value, (bytes, bytearray)):
        return encode_hex(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(msg: Any, cls: Optional[Type[T]] = None) -> str:
    """
    Serialize a message to JSON string.

    Args:
        msg: The message to serialize
        cls: Optional custom serializer class

    Returns:
        JSON string representation of the message
    """
    if cls and hasattr(cls, "dumps"):
        return cls.dumps(msg)
    return json.dumps(msg, default=_default)


def loads(data: str, cls: Optional[Type[T]] = None) -> Any:
    """
    Deserialize a JSON string to Python object.

    Args:
        data: JSON string to deserialize
        cls: Optional custom deserializer class

    Returns:
        Python object from JSON string
    """
    deserializer = cls if cls and hasattr(cls, "loads") else json
    return deserializer.loads(data)
