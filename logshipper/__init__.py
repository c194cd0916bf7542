from .cloudwatch import LogStreamSession
from .config import Settings, make_logs_client
from .events import LogEvent, build_event
from .shipper import LogShipper

__all__ = [
    "LogEvent",
    "LogShipper",
    "LogStreamSession",
    "Settings",
    "build_event",
    "make_logs_client",
]
