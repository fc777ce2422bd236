"""
Tracker package for communicating with UDP BitTorrent trackers.
"""
from .errors import (
    BindFailed,
    ProtocolMismatch,
    RecvTimeout,
    ResolveFailed,
    SendFailed,
    ShortResponse,
    TrackerError,
)
from .tracker_client import TrackerClient
from .udp_protocol import Action, AnnounceResponse, Event
from .udp_tracker import ClientState, UDPTrackerClient
from .utils import Peer, compact_to_peers, parse_tracker_url

__all__ = [
    'UDPTrackerClient', 'TrackerClient', 'ClientState',
    'AnnounceResponse', 'Action', 'Event', 'Peer',
    'compact_to_peers', 'parse_tracker_url',
    'TrackerError', 'BindFailed', 'ResolveFailed', 'SendFailed',
    'RecvTimeout', 'ProtocolMismatch', 'ShortResponse',
]
