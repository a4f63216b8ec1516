"""Operator scripts: audit trail and command-line front end."""
