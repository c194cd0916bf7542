import json, time
from collections.abc import Mapping
from typing import Any, Optional

from botocore.exceptions import ClientError
from pydantic import BaseModel, ConfigDict

INFO  = "info"
ERROR = "error"


class EventPayload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    level: str
    message: str
    route: str = ""
    error: Optional[Any] = None

    def as_dict(self) -> dict:
        data = self.model_dump()
        if data.get("error") is None:
            data.pop("error", None)
        return data


class LogEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    payload: EventPayload
    timestamp: int

    def serialize(self) -> str:
        return json.dumps(self.payload.as_dict(), separators=(",", ":"), default=str)

    def to_cloudwatch(self) -> dict:
        return {"timestamp": self.timestamp, "message": self.serialize()}


def now_ms() -> int:
    return int(time.time() * 1000)


def route_of(context) -> str:
    """Originating route of a request context; "" when there is none."""
    if context is None:
        return ""
    if isinstance(context, str):
        return context
    url = getattr(context, "url", None)
    if url is None:
        return ""
    path = getattr(url, "path", None)
    if path is None:
        return str(url)
    query = getattr(url, "query", "")
    return f"{path}?{query}" if query else path


def describe_error(error) -> Any:
    if isinstance(error, ClientError):
        return {
            "type": type(error).__name__,
            "code": error.response.get("Error", {}).get("Code", "ClientError"),
            "message": str(error),
        }
    if isinstance(error, BaseException):
        return {"type": type(error).__name__, "message": str(error)}
    if isinstance(error, Mapping):
        return dict(error)
    return str(error)


def build_event(level: str, message, context=None, extra=None, error=None) -> LogEvent:
    fields: dict = {}
    if isinstance(extra, Mapping):
        fields.update({str(k): v for k, v in extra.items()})
    elif extra is not None:
        fields["data"] = extra

    # reserved fields go last so extras can't shadow them
    fields["level"] = level
    fields["message"] = str(message)
    fields["route"] = route_of(context)
    if error is not None:
        fields["error"] = describe_error(error)

    return LogEvent(payload=EventPayload(**fields), timestamp=now_ms())
