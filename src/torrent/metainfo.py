import hashlib
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from bencode import BencodeDict, BencodeList, BencodeString, decode_one
from tracker.utils import parse_tracker_url

logger = logging.getLogger(__name__)


def extract_info_bytes(raw: bytes, info: BencodeDict) -> bytes:
    """
    Returns the exact bencoded 'info' dictionary byte slice.
    The decoder stamps every node with its offset and span, so no re-scan is needed.
    """
    return raw[info.offset:info.offset + info.length]


def _text(value) -> Optional[str]:
    return value.text() if isinstance(value, BencodeString) else None


class TorrentMeta:
    """
    Minimal view of a .torrent file: announce URLs, name and info_hash.
    Only the fields needed to reach a tracker are read.
    """
    def __init__(self, path: Path):
        self.path = Path(path)
        self._load(self.path.read_bytes())

    @classmethod
    def from_bytes(cls, raw: bytes) -> "TorrentMeta":
        meta = cls.__new__(cls)
        meta.path = None
        meta._load(bytes(raw))
        return meta

    def _load(self, raw: bytes):
        root = decode_one(raw)
        if not isinstance(root, BencodeDict):
            raise ValueError("Invalid torrent: root must be a dictionary")
        self.root = root

        # ------------------ INFO ------------------
        info = root.get(b"info")
        if not isinstance(info, BencodeDict):
            raise ValueError("Torrent missing 'info' dictionary")
        self.info = info

        self.info_bytes = extract_info_bytes(raw, info)
        self.info_hash = hashlib.sha1(self.info_bytes).digest()

        self.name = _text(info.get(b"name"))

        # ------------------ ANNOUNCE URL ------------------
        self.announce = _text(root.get(b"announce"))

        # ------------------ ANNOUNCE-LIST ------------------
        self.announce_list = None
        ann_list_b = root.get(b"announce-list")

        if isinstance(ann_list_b, BencodeList):
            tiers = []
            for tier in ann_list_b:
                if not isinstance(tier, BencodeList):
                    continue
                urls = [u.text() for u in tier if isinstance(u, BencodeString)]
                if urls:
                    tiers.append(urls)
            if tiers:
                self.announce_list = tiers

    def udp_trackers(self) -> List[Tuple[str, int]]:
        """(host, port) of every UDP tracker, announce first, then announce-list order."""
        urls = [self.announce] if self.announce else []
        for tier in self.announce_list or []:
            urls.extend(tier)

        trackers = []
        for url in urls:
            if not url.startswith("udp://"):
                continue
            try:
                addr = parse_tracker_url(url)
            except ValueError as e:
                logger.debug("Ignoring malformed tracker URL %s: %s", url, e)
                continue
            if addr not in trackers:
                trackers.append(addr)
        return trackers

    def __repr__(self):
        return (
            f"TorrentMeta(name={self.name!r}, info_hash={self.info_hash.hex()}, "
            f"announce={self.announce!r})"
        )
