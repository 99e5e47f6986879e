"""Configuration module for the SMTP relay.

Loads and validates relay settings from environment variables or .env file.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from smtp_relay.config.settings import RelayConfig, load_config

__all__ = ["RelayConfig", "load_config"]
