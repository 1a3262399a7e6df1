"""
machine_orchestrator.hardware

Client boundary for the smart machine hardware API.
"""
