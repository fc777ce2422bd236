"""
Wire format of the UDP tracker protocol (BEP 15).

All multi-byte fields are big-endian on the wire.
"""
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List

from .errors import ProtocolMismatch, ShortResponse
from .utils import Peer, compact_to_peers

PROTOCOL_ID = 0x41727101980
DEFAULT_NUM_WANT = 50

CONNECT_REQ = struct.Struct(">QII")                 # protocol_id, action, transaction_id
CONNECT_RESP = struct.Struct(">IIQ")                # action, transaction_id, connection_id
ANNOUNCE_REQ = struct.Struct(">QII20s20sQQQIIIiH")  # 98 bytes
ANNOUNCE_RESP = struct.Struct(">IIIII")             # action, transaction_id, interval, leechers, seeders
RESP_PREFIX = struct.Struct(">II")                  # action, transaction_id


class Action(IntEnum):
    CONNECT = 0
    ANNOUNCE = 1
    SCRAPE = 2
    ERROR = 3


class Event(IntEnum):
    NONE = 0
    COMPLETED = 1
    STARTED = 2
    STOPPED = 3


@dataclass
class AnnounceResponse:
    """Decoded announce reply: swarm statistics plus peer endpoints."""
    action: int
    transaction_id: int
    interval: int
    leechers: int
    seeders: int
    peers: List[Peer] = field(default_factory=list)


def build_connect_request(transaction_id: int) -> bytes:
    return CONNECT_REQ.pack(PROTOCOL_ID, Action.CONNECT, transaction_id)


def build_announce_request(
    connection_id: int,
    transaction_id: int,
    info_hash: bytes,
    peer_id: bytes = bytes(20),
    downloaded: int = 0,
    left: int = 0,
    uploaded: int = 0,
    event: int = Event.NONE,
    ip_address: int = 0,
    key: int = 0,
    num_want: int = DEFAULT_NUM_WANT,
    port: int = 0,
) -> bytes:
    """
    Build an announce request.
    info_hash: 20 bytes
    peer_id:   20 bytes (zeros are accepted by trackers)
    """
    if len(info_hash) != 20 or len(peer_id) != 20:
        raise ValueError("info_hash and peer_id must be 20 bytes each")

    return ANNOUNCE_REQ.pack(
        connection_id,
        Action.ANNOUNCE,
        transaction_id,
        info_hash,
        peer_id,
        downloaded,
        left,
        uploaded,
        event,
        ip_address,
        key,
        num_want,
        port,
    )


def _check_reply(data: bytes, transaction_id: int, expected: Action, header_len: int, step: str):
    """Validates length, transaction_id and action shared by every reply."""
    if len(data) < RESP_PREFIX.size:
        raise ShortResponse(
            f"Reply of {len(data)} bytes is shorter than the {header_len} byte header",
            step, {"received": len(data)},
        )

    action, trans_res = RESP_PREFIX.unpack_from(data)

    if trans_res != transaction_id:
        raise ProtocolMismatch(
            "Transaction id mismatch", step,
            {"sent": transaction_id, "received": trans_res},
        )
    if action == Action.ERROR:
        message = data[RESP_PREFIX.size:].decode("utf-8", "replace")
        raise ProtocolMismatch(f"Tracker returned error: {message}", step, {"action": action})
    if action != expected:
        raise ProtocolMismatch(
            f"Unexpected action {action}", step,
            {"expected": int(expected), "received": action},
        )
    if len(data) < header_len:
        raise ShortResponse(
            f"Reply of {len(data)} bytes is shorter than the {header_len} byte header",
            step, {"received": len(data)},
        )


def parse_connect_response(data: bytes, transaction_id: int) -> int:
    """Validates a connect reply and returns its connection_id."""
    _check_reply(data, transaction_id, Action.CONNECT, CONNECT_RESP.size, "connect")
    _, _, connection_id = CONNECT_RESP.unpack_from(data)
    return connection_id


def parse_announce_response(data: bytes, transaction_id: int) -> AnnounceResponse:
    """Validates an announce reply and decodes every whole peer record it carries."""
    _check_reply(data, transaction_id, Action.ANNOUNCE, ANNOUNCE_RESP.size, "announce")
    action, trans_res, interval, leechers, seeders = ANNOUNCE_RESP.unpack_from(data)
    return AnnounceResponse(
        action=action,
        transaction_id=trans_res,
        interval=interval,
        leechers=leechers,
        seeders=seeders,
        peers=compact_to_peers(data[ANNOUNCE_RESP.size:]),
    )
