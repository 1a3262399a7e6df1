"""
machine_orchestrator.services

Core services: the orchestrator (allocation/start/get + lifecycle sequencing) and the
dispatcher that routes inbound operation descriptors to it.
"""
