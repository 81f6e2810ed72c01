"""
Service layer: configuration, error taxonomy, and exercise orchestration.
"""
