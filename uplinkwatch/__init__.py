"""Internet connectivity watchdog.

This package tracks outbound connectivity and the external address of a host,
persists that status across restarts, classifies why the process is starting
and sends notifications on state transitions.
"""

from . import app, core, detector, health, models, monitor, notify, probe, storage

__version__ = "0.1.0"
