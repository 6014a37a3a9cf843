"""Command-line interface adapters.

Provides CLI commands for managing delivery events:
- list / list_by: Inspect recorded events
- create / update: Record or correct events
- rates / summary: Calculate billing records
"""
