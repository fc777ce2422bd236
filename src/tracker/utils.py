"""
Utility functions for tracker communication.
"""
import logging
import urllib.parse
from typing import List, NamedTuple, Tuple

logger = logging.getLogger(__name__)

PEER_RECORD_LEN = 6  # 4 bytes IPv4 + 2 bytes port


class Peer(NamedTuple):
    """A peer endpoint; compares equal to a plain (ip, port) tuple."""
    ip: str
    port: int


def compact_to_peers(blob: bytes) -> List[Peer]:
    """
    Decodes a compact peer list (6 bytes per peer: 4 for IP, 2 for port)
    into a list of (IP, port) tuples. A trailing partial record is dropped.
    """
    whole = len(blob) - len(blob) % PEER_RECORD_LEN
    if whole != len(blob):
        logger.debug("Ignoring %d trailing bytes of a partial peer record", len(blob) - whole)

    peers = []
    for i in range(0, whole, PEER_RECORD_LEN):
        ip = ".".join(str(b) for b in blob[i:i+4])
        port = int.from_bytes(blob[i+4:i+6], "big")
        peers.append(Peer(ip, port))
    return peers


def parse_tracker_url(url: str) -> Tuple[str, int]:
    """Splits ``udp://host:port[/announce]`` into (host, port)."""
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme != "udp":
        raise ValueError(f"Not a UDP tracker URL: {url!r}")
    if not parsed.hostname:
        raise ValueError(f"UDP tracker URL has no host: {url!r}")
    try:
        port = parsed.port
    except ValueError as exc:
        raise ValueError(f"UDP tracker URL has an invalid port: {url!r}") from exc
    if port is None:
        raise ValueError(f"UDP tracker URL has no port: {url!r}")
    return parsed.hostname, port
