"""Networking exercises: IPv4 analysis, bit coding, number helpers, message queues and socket services."""

__version__ = "0.1.0"

__all__ = [
    "ipv4",
    "coding",
    "numbers",
    "msgqueue",
    "tcp_services",
    "chat",
    "local_services",
]