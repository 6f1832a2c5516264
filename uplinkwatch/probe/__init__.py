"""Address probing components for the connectivity watchdog."""

from .ip_prober import HttpAddressProber

__all__ = ["HttpAddressProber"]
