"""SMTP relay entry point.

Allows running the relay via: python -m smtp_relay
"""

from smtp_relay.api.main import run

if __name__ == "__main__":
    run()
