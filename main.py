import asyncio
import logging
from pathlib import Path
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), 'src'))

from bencode import decode
from torrent.metainfo import TorrentMeta
from tracker.tracker_client import TrackerClient


async def main(torrent_path: Path):
    raw = torrent_path.read_bytes()
    print(decode(raw).dump())

    meta = TorrentMeta.from_bytes(raw)
    print("announce:", meta.announce)
    print("announce_list:", meta.announce_list)
    print("Computed info_hash:", meta.info_hash.hex())

    tracker = TrackerClient(meta, max_retries=2)
    peers = await tracker.announce()

    print(f"[Main] Trackers returned {len(peers)} peers")
    for ip, port in peers:
        print(f"  {ip}:{port}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("torrents/sample.torrent")
    asyncio.run(main(path))
