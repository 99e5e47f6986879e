"""Operator scripts for the SMTP relay."""
