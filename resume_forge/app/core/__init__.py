"""Core configuration, security helpers and the error taxonomy."""
