"""Allow ``python -m mdns_responder`` (used by the installed service unit)."""

from mdns_responder.cli import main

main()
