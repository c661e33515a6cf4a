"""unitrack — personal work timer that books rounded time against Linear issues.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
