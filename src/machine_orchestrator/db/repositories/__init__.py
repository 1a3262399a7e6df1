"""
machine_orchestrator.db.repositories

Data-access repositories; import directly from submodules.
"""
