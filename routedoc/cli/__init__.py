"""
Routedoc CLI.

Usage:
    routedoc generate myapp.controllers --output openapi.json
    routedoc serve myapp.controllers --port 8080
"""

__cli_name__ = "routedoc"
