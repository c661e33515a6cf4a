"""Core Layer — timer state machine and time arithmetic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Every operation receives `now` explicitly; nothing here reads a clock

Design Decisions:
    - Functional core separated from imperative shell: the engine returns
      effects, the service applies them
"""
