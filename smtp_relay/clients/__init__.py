"""Clients module for the SMTP relay.

Contains the integration with the upstream SMTP server.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from smtp_relay.clients.smtp import SMTPClient

__all__ = ["SMTPClient"]
