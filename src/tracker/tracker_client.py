import asyncio
import logging
from typing import List, Optional, Tuple

from .errors import TrackerError
from .udp_tracker import DEFAULT_TIMEOUT, UDPTrackerClient
from .utils import Peer

logger = logging.getLogger(__name__)


class TrackerClient:
    """
    Announces to every UDP tracker listed in a torrent and merges the peers.
    Each tracker gets its own UDPTrackerClient, so its own socket.
    """
    def __init__(self, torrent_meta, peer_id: bytes = bytes(20), timeout=DEFAULT_TIMEOUT, max_retries=0):
        self.meta = torrent_meta
        self.peer_id = peer_id
        self.timeout = timeout
        self.max_retries = max_retries

        self.trackers: List[Tuple[str, int]] = torrent_meta.udp_trackers()
        if not self.trackers:
            raise ValueError("No UDP announce URLs found in torrent")

    async def _announce_one(self, host: str, port: int) -> Optional[List[Peer]]:
        client = UDPTrackerClient(timeout=self.timeout, max_retries=self.max_retries, peer_id=self.peer_id)
        try:
            async with client:
                resp = await client.get_peers(host, port, self.meta.info_hash)
            return resp.peers
        except TrackerError as e:
            logger.warning("Tracker udp://%s:%d failed: %s", host, port, e)
            return None

    async def announce(self) -> List[Peer]:
        tasks = [self._announce_one(host, port) for host, port in self.trackers]
        results = await asyncio.gather(*tasks)

        all_peers = []
        seen = set()
        for peer_list in results:
            for peer in peer_list or []:
                if peer not in seen:
                    seen.add(peer)
                    all_peers.append(peer)

        if all(r is None for r in results):
            raise TrackerError("All UDP trackers failed.")

        return all_peers
