"""Domain layer: adapter selection rules and TXT record building.

This layer depends only on stdlib and :mod:`mdns_responder.errors`.
It must never import from services, infrastructure, commands, or config.
"""
