"""External adapters for the delivery rates system.

This package provides implementations of the core port interfaces and
the entry-point plumbing around them.

Adapter Organization:

- store/: Event storage (in-memory) and JSON seed loading
- report/: Presentation of events and rates (stdout)
- cli/: Command-line interface commands
"""
