"""
machine_orchestrator.domain

Domain types shared by every layer: the machine snapshot, its lifecycle rules,
operation outcomes and the collaborator interfaces the core consumes.
"""
