"""
Domain layer: entities, exceptions and pure domain services.
"""
