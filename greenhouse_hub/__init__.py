"""
Greenhouse Hub.

Gateway between greenhouse controllers on ThingsBoard and the
applications that read their sensors and drive their actuators.
"""
__version__ = "1.0.0"
