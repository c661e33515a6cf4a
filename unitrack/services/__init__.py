"""Services Layer — the timer shell and the completion dispatcher.

Invariants:
    - Services own asyncio tasks (tick loop, delivery worker); core never does
    - Only TimerService mutates the engine
"""
