"""
UDP Tracker Client implementation using asyncio DatagramProtocol.
"""
import asyncio
import logging
import random
import socket
import time
from enum import Enum
from typing import Optional, Tuple

from .errors import BindFailed, RecvTimeout, ResolveFailed, SendFailed, TrackerError
from .udp_protocol import (
    RESP_PREFIX,
    AnnounceResponse,
    build_announce_request,
    build_connect_request,
    parse_announce_response,
    parse_connect_response,
)

logger = logging.getLogger(__name__)

DEFAULT_BIND = ("0.0.0.0", 0)  # ephemeral local port
DEFAULT_TIMEOUT = 15.0
CONNECTION_ID_TTL = 120  # seconds a connection_id stays valid
BEP15_MAX_RETRIES = 8


class ClientState(Enum):
    UNBOUND = "unbound"
    BOUND = "bound"
    CONNECTED = "connected"
    ANNOUNCE_PENDING = "announce_pending"
    DONE = "done"
    FAILED = "failed"


def _new_transaction_id() -> int:
    return random.randint(0, 2**32 - 1)


class UDPTrackerProtocol(asyncio.DatagramProtocol):
    """
    A DatagramProtocol to handle UDP communication with a tracker.
    Holds at most one outstanding request. When the request names its
    transaction_id, replies carrying another one are dropped.
    """
    def __init__(self):
        self.transport = None
        self.response_future: Optional[asyncio.Future] = None
        self.transaction_id: Optional[int] = None

    def connection_made(self, transport):
        self.transport = transport

    def datagram_received(self, data, addr):
        if not self.response_future or self.response_future.done():
            logger.debug("Dropping unsolicited datagram of %d bytes from %s", len(data), addr)
            return

        if self.transaction_id is not None and len(data) >= RESP_PREFIX.size:
            _, trans_res = RESP_PREFIX.unpack_from(data)
            if trans_res != self.transaction_id:
                logger.debug("Dropping stale reply for transaction %#x from %s (waiting for %#x)",
                             trans_res, addr, self.transaction_id)
                return

        self.response_future.set_result(data)

    def error_received(self, exc):
        if self.response_future and not self.response_future.done():
            self.response_future.set_exception(exc)

    def connection_lost(self, exc):
        if self.response_future and not self.response_future.done():
            self.response_future.set_exception(exc or ConnectionError("UDP transport closed"))

    async def send_and_receive(
        self, data: bytes, addr: Tuple[str, int], timeout: float, transaction_id: Optional[int] = None
    ) -> bytes:
        if not self.transport:
            raise RuntimeError("Transport not connected")
        self.transaction_id = transaction_id
        self.response_future = asyncio.get_running_loop().create_future()
        self.transport.sendto(data, addr)
        return await asyncio.wait_for(self.response_future, timeout=timeout)


class UDPTrackerClient:
    """
    Talks to a single UDP tracker over one datagram socket.

    Lifecycle: ``init()`` binds the socket, ``connect()`` obtains a
    connection_id, ``announce()`` exchanges it for peers. Any failure moves
    the client to ``ClientState.FAILED``. Use it as an async context manager
    so the socket is released on every path.
    """
    def __init__(
        self,
        bind_host: str = DEFAULT_BIND[0],
        bind_port: int = DEFAULT_BIND[1],
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = 0,
        peer_id: bytes = bytes(20),
    ):
        if not 0 <= max_retries <= BEP15_MAX_RETRIES:
            raise ValueError(f"max_retries must be between 0 and {BEP15_MAX_RETRIES}")
        if len(peer_id) != 20:
            raise ValueError("peer_id must be 20 bytes")

        self.bind_host = bind_host
        self.bind_port = bind_port
        self.timeout = timeout
        self.max_retries = max_retries
        self.peer_id = peer_id

        self.state = ClientState.UNBOUND
        self.protocol: Optional[UDPTrackerProtocol] = None
        self.transport: Optional[asyncio.DatagramTransport] = None

        self.connection_id: Optional[int] = None
        self.connection_time = 0.0
        self.connected_to: Optional[Tuple[str, int]] = None

    async def __aenter__(self):
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()

    @property
    def local_address(self) -> Optional[Tuple[str, int]]:
        if not self.transport:
            return None
        return self.transport.get_extra_info("sockname")

    async def init(self):
        """Creates the datagram endpoint. Does nothing if already bound."""
        if self.transport:
            return

        loop = asyncio.get_running_loop()
        try:
            self.transport, self.protocol = await loop.create_datagram_endpoint(
                UDPTrackerProtocol,
                local_addr=(self.bind_host, self.bind_port),
                family=socket.AF_INET,
            )
        except OSError as e:
            self.state = ClientState.FAILED
            raise BindFailed(
                f"Could not bind {self.bind_host}:{self.bind_port}: {e}", "bind",
                {"host": self.bind_host, "port": self.bind_port},
            ) from e

        self.state = ClientState.BOUND
        logger.debug("UDP tracker socket bound to %s", self.local_address)

    def close(self):
        if self.transport:
            self.transport.close()
        self.transport = None
        self.protocol = None
        self.connection_id = None
        self.connected_to = None
        self.state = ClientState.UNBOUND

    def connection_valid(self) -> bool:
        """True while the last connection_id is younger than CONNECTION_ID_TTL."""
        return (
            self.connection_id is not None
            and time.monotonic() - self.connection_time < CONNECTION_ID_TTL
        )

    async def _resolve(self, host: str, port: int, step: str) -> Tuple[str, int]:
        loop = asyncio.get_running_loop()
        try:
            infos = await loop.getaddrinfo(host, port, family=socket.AF_INET, type=socket.SOCK_DGRAM)
        except (socket.gaierror, UnicodeError) as e:
            raise ResolveFailed(f"Could not resolve {host}: {e}", step, {"host": host}) from e
        if not infos:
            raise ResolveFailed(f"No IPv4 address for {host}", step, {"host": host})
        return infos[0][4]

    async def _request(self, payload: bytes, addr: Tuple[str, int], step: str, transaction_id: int) -> bytes:
        """
        Sends ``payload`` and waits for one reply, resending with BEP 15 backoff.

        With retries enabled, late replies to an earlier request are skipped.
        A single attempt takes the first datagram so a mismatch is reported.
        """
        if not self.protocol:
            raise BindFailed("Socket is not bound, call init() first", step)

        expected = transaction_id if self.max_retries else None
        attempts = self.max_retries + 1
        for attempt in range(attempts):
            wait = self.timeout * (2 ** attempt)
            try:
                return await self.protocol.send_and_receive(payload, addr, wait, expected)
            except asyncio.TimeoutError:
                logger.debug("%s to %s:%d timed out after %.1fs (attempt %d/%d)",
                             step, addr[0], addr[1], wait, attempt + 1, attempts)
            except OSError as e:
                raise SendFailed(f"Could not reach {addr[0]}:{addr[1]}: {e}", step, {"addr": addr}) from e

        raise RecvTimeout(
            f"No reply from {addr[0]}:{addr[1]}", step,
            {"timeout": self.timeout, "attempts": attempts},
        )

    async def connect(self, host: str, port: int) -> int:
        """Performs the connect handshake and returns the tracker's connection_id."""
        try:
            addr = await self._resolve(host, port, "connect")
            transaction_id = _new_transaction_id()
            resp = await self._request(build_connect_request(transaction_id), addr, "connect", transaction_id)
            connection_id = parse_connect_response(resp, transaction_id)
        except TrackerError:
            self.state = ClientState.FAILED
            raise

        self.connection_id = connection_id
        self.connection_time = time.monotonic()
        self.connected_to = (host, port)
        self.state = ClientState.CONNECTED
        logger.debug("Connected to tracker %s:%d, connection_id=%#x", host, port, connection_id)
        return connection_id

    async def announce(self, connection_id: int, info_hash: bytes, host: str, port: int, **fields) -> AnnounceResponse:
        """
        Sends an announce and returns the decoded reply.

        ``fields`` override the request fields that default to zero
        (downloaded, left, uploaded, event, ip_address, key, port) as well as
        num_want (50) and peer_id (the client's).
        """
        if len(info_hash) != 20:
            raise ValueError("info_hash must be 20 bytes")
        fields.setdefault("peer_id", self.peer_id)

        self.state = ClientState.ANNOUNCE_PENDING
        try:
            addr = await self._resolve(host, port, "announce")
            transaction_id = _new_transaction_id()
            req = build_announce_request(connection_id, transaction_id, info_hash, **fields)
            resp = await self._request(req, addr, "announce", transaction_id)
            result = parse_announce_response(resp, transaction_id)
        except TrackerError:
            self.state = ClientState.FAILED
            raise

        self.state = ClientState.DONE
        logger.info(
            "Tracker %s:%d returned %d peers (seeders=%d, leechers=%d, interval=%ds)",
            host, port, len(result.peers), result.seeders, result.leechers, result.interval,
        )
        return result

    async def get_peers(self, host: str, port: int, info_hash: bytes, **fields) -> AnnounceResponse:
        """Binds if needed, reuses a still-valid connection_id for this tracker, then announces."""
        await self.init()
        if not (self.connection_valid() and self.connected_to == (host, port)):
            await self.connect(host, port)
        return await self.announce(self.connection_id, info_hash, host, port, **fields)
