"""Infrastructure Layer — SQLite persistence, Linear client, notifications, logging.

Invariants:
    - Infrastructure never drives the timer state machine
    - Failures are mapped to UnitrackError subclasses (core/errors.py)
"""
