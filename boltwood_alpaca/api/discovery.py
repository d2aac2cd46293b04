"""
ASCOM Alpaca UDP discovery protocol.

Listens on UDP port 32227 (configurable) and answers "alpacadiscovery1"
probes, either as plain text or as a JSON object {"alpacadiscovery1": 1}.
"""

import json
import logging
import random
import socket
import threading
from typing import Optional, Tuple

from boltwood_alpaca.utils.exceptions import DiscoveryMalformed


logger = logging.getLogger(__name__)

DISCOVERY_PORT = 32227
DISCOVERY_MESSAGE = "alpacadiscovery1"
DISCOVERY_VERSION = 1


def generate_device_id() -> str:
    """Random device identifier in [1, 65535], as a string."""
    return str(random.randint(1, 65535))


def check_discovery_request(data: bytes) -> None:
    """
    Validate a discovery datagram.

    Raises:
        DiscoveryMalformed: If the payload is not a discovery request.
    """
    try:
        text = data.decode("utf-8").strip()
    except UnicodeDecodeError as e:
        raise DiscoveryMalformed("Payload is not UTF-8") from e

    if text.lower() == DISCOVERY_MESSAGE:
        return

    try:
        request = json.loads(text)
    except ValueError as e:
        raise DiscoveryMalformed("Payload is neither the discovery literal nor JSON") from e

    if not isinstance(request, dict):
        raise DiscoveryMalformed("JSON payload is not an object")

    for key, value in request.items():
        if key.lower() != DISCOVERY_MESSAGE:
            continue
        # bool is an int subclass; true must not count as 1
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 1:
            return

    raise DiscoveryMalformed(f"No '{DISCOVERY_MESSAGE}': 1 entry in JSON payload")


def is_discovery_request(data: bytes) -> bool:
    """Check whether a datagram is a valid Alpaca discovery request."""
    try:
        check_discovery_request(data)
    except DiscoveryMalformed:
        return False
    return True


class DiscoveryServer:
    """UDP discovery server for ASCOM Alpaca."""

    def __init__(self, alpaca_port: int, device_id: str, discovery_port: int = DISCOVERY_PORT):
        """
        Initialize discovery server.

        Args:
            alpaca_port: HTTP port where Alpaca API is running.
            device_id: Identifier reported in every reply (stable for the process).
            discovery_port: UDP port to listen on (0 picks a free port).
        """
        self.alpaca_port = alpaca_port
        self.device_id = device_id
        self.discovery_port = discovery_port
        self.socket: Optional[socket.socket] = None
        self.thread: Optional[threading.Thread] = None
        self.running = False

    @property
    def bound_port(self) -> Optional[int]:
        """Actual UDP port in use (useful when constructed with port 0)."""
        if self.socket is None:
            return None
        return self.socket.getsockname()[1]

    def start(self) -> None:
        """Start discovery server in background thread."""
        if self.running:
            logger.warning("Discovery server already running")
            return

        try:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self.socket.bind(("0.0.0.0", self.discovery_port))
            self.socket.settimeout(1.0)  # 1 second timeout for clean shutdown

            self.running = True

            self.thread = threading.Thread(target=self._listen, name="alpaca-discovery", daemon=True)
            self.thread.start()

            logger.info(f"Discovery server started on UDP port {self.bound_port}")

        except OSError as e:
            logger.error(f"Failed to start discovery server: {e}")
            if self.socket:
                self.socket.close()
                self.socket = None
            raise

    def stop(self) -> None:
        """Stop discovery server."""
        if not self.running:
            return

        self.running = False

        if self.thread:
            self.thread.join(timeout=3.0)

        if self.socket:
            self.socket.close()

        logger.info("Discovery server stopped")

    def _listen(self) -> None:
        """Listen for discovery packets."""
        logger.debug("Discovery server listening...")

        while self.running:
            try:
                data, addr = self.socket.recvfrom(1024)
            except socket.timeout:
                # Timeout is expected (for clean shutdown)
                continue
            except OSError as e:
                if self.running:
                    logger.error(f"Error in discovery server: {e}")
                continue

            self.handle_datagram(data, addr)

    def handle_datagram(self, data: bytes, addr: Tuple[str, int]) -> bool:
        """
        Handle one datagram, replying if it is a discovery request.

        Returns:
            True if a reply was sent.
        """
        try:
            check_discovery_request(data)
        except DiscoveryMalformed as e:
            logger.info(f"Ignoring datagram from {addr[0]}:{addr[1]} ({e}): {data[:100]!r}")
            return False

        logger.debug(f"Valid discovery request from {addr[0]}:{addr[1]}")
        return self._respond(addr)

    def _respond(self, addr: Tuple[str, int]) -> bool:
        """
        Send discovery response to client.

        Args:
            addr: Client address (ip, port).
        """
        try:
            response = json.dumps({
                "alpacaPort": self.alpaca_port,
                "version": DISCOVERY_VERSION,
                "id": self.device_id,
            })
            self.socket.sendto(response.encode("utf-8"), addr)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to send discovery response to {addr[0]}:{addr[1]}: {e}")
            return False

        logger.info(f"Discovery response sent to {addr[0]}:{addr[1]} (alpacaPort={self.alpaca_port})")
        return True
