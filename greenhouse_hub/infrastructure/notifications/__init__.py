# Notification sinks

from .logging_sink import LoggingNotificationSink

__all__ = ['LoggingNotificationSink']
