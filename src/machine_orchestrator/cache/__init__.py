"""
machine_orchestrator.cache

Process-wide read-through cache of machine snapshots.
"""
