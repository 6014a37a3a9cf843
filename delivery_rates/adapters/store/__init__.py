"""Delivery event store adapters.

- memory: keyed in-memory store
- seed: JSON loader for initial events
"""
