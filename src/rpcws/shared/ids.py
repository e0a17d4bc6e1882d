import uuid
from typing import Callable

from rpcws.protocol.base import RequestId

IdGenerator = Callable[[], RequestId]


def default_id() -> str:
    """Return a random RFC 4122 version 4 UUID string."""
    return str(uuid.uuid4())
