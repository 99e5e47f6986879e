"""API module for the SMTP relay.

Contains the framework-free dispatch handler and the FastAPI host.
"""

from smtp_relay.api.handler import InboundRequest, MailDispatchHandler, RelayResponse
from smtp_relay.api.main import create_app, run

__all__ = [
    "InboundRequest",
    "MailDispatchHandler",
    "RelayResponse",
    "create_app",
    "run",
]
