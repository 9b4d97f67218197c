"""Infrastructure layer: zeroconf, psutil, systemd.

This layer wraps third-party libraries and OS facilities behind small
backend classes.  It must never import from services, commands, or output.
"""
