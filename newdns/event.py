"""Events emitted to the optional logger while requests are processed."""

from __future__ import annotations

import enum
from typing import Any, Callable, Optional


class Event(enum.IntEnum):
    """The kind of event handed to a logger."""

    #: Requests dropped by leaving the connection hanging; see the reason.
    IGNORED = 0
    #: Emitted for every accepted request; a FINISH event always follows.
    REQUEST = 1
    #: Requests answered with an error due to some incompatibility.
    REFUSED = 2
    #: Errors returned by the zone callbacks and validation functions.
    BACKEND_ERROR = 3
    #: Errors returned by the connection.
    NETWORK_ERROR = 4
    #: The final response sent to the client.
    RESPONSE = 5
    #: A request has been processed.
    FINISH = 6
    #: A request forwarded to the fallback server.
    PROXY_REQUEST = 7
    #: A response received from the fallback server.
    PROXY_RESPONSE = 8
    #: An error returned while talking to the fallback server.
    PROXY_ERROR = 9

    def __str__(self) -> str:
        return _LABELS[self]


_LABELS = {
    Event.IGNORED: "Ignored",
    Event.REQUEST: "Request",
    Event.REFUSED: "Refused",
    Event.BACKEND_ERROR: "BackendError",
    Event.NETWORK_ERROR: "NetworkError",
    Event.RESPONSE: "Response",
    Event.FINISH: "Finish",
    Event.PROXY_REQUEST: "ProxyRequest",
    Event.PROXY_RESPONSE: "ProxyResponse",
    Event.PROXY_ERROR: "ProxyError",
}

#: A logger receives the event, an optional message, an optional error and a reason.
Logger = Callable[[Event, Any, Optional[BaseException], str], None]


def emit(
    logger: Optional[Logger],
    event: Event,
    msg: Any = None,
    error: Optional[BaseException] = None,
    reason: str = "",
) -> None:
    """Pass the event to the logger if one is configured."""
    if logger is not None:
        logger(event, msg, error, reason)