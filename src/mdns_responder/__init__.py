"""mdns-responder: advertise SMB shares on the LAN over mDNS/DNS-SD."""

__version__ = "0.3.0"
