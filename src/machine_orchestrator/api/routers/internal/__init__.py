"""
machine_orchestrator.api.routers.internal

In-process stand-ins for external systems, mounted outside prod.
"""
