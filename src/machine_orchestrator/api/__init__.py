"""
machine_orchestrator.api

HTTP surface: FastAPI app factory, dependency wiring and routers.
"""


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: it turns HTTP requests into dispatch descriptors and back.
