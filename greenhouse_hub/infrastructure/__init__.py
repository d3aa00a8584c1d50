"""
Infrastructure layer: ThingsBoard client, persistence and notification sinks.
"""
