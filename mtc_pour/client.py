"""
Client API for sending solutions to a running solution bridge.
"""

import json
import logging
import socket
from typing import Optional

from mtc_pour.core.messages import Solution

logger = logging.getLogger(__name__)


class SolutionPublisherClient:
    """
    Client for the solution bridge server.

    Example usage:
        with SolutionPublisherClient(port=8010) as client:
            client.publish_solution("/execute_first_solution/solution", solution)
    """

    def __init__(self, host: str = "localhost", port: int = 8010):
        """
        Initialize publisher client.

        Parameters
        ----------
        host : str
            Bridge host address.
        port : int
            Bridge port.
        """
        self.host = host
        self.port = port
        self.socket = None
        self.connected = False
        self.buffer = ""

    def connect(self, timeout: float = 5.0) -> bool:
        """
        Connect to the bridge.

        Parameters
        ----------
        timeout : float
            Connection timeout in seconds. Replies are awaited without a
            timeout, since a publish only returns once the solution has been
            handled.

        Returns
        -------
        bool
            True if connected successfully.
        """
        try:
            self.socket = socket.create_connection((self.host, self.port), timeout=timeout)
            self.socket.settimeout(None)
            self.connected = True
            logger.info("Connected to solution bridge at %s:%d", self.host, self.port)
            return True
        except OSError as e:
            logger.error("Connection failed: %s", e)
            self.connected = False
            return False

    def disconnect(self):
        """Disconnect from the bridge."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None
        self.connected = False

    def _send_command(self, command: dict) -> Optional[dict]:
        """
        Send command and receive the response.

        Returns
        -------
        Optional[dict]
            Response dictionary or None on error.
        """
        if not self.connected or not self.socket:
            logger.error("Not connected to solution bridge")
            return None

        try:
            message = json.dumps(command) + "\n"
            self.socket.sendall(message.encode("utf-8"))

            while "\n" not in self.buffer:
                data = self.socket.recv(4096).decode("utf-8")
                if not data:
                    logger.error("Connection closed by bridge")
                    self.connected = False
                    return None
                self.buffer += data

            line, self.buffer = self.buffer.split("\n", 1)
            return json.loads(line)

        except (OSError, ValueError) as e:
            logger.error("Communication error: %s", e)
            self.connected = False
            return None

    def ping(self) -> bool:
        response = self._send_command({"cmd": "ping"})
        return response is not None and response.get("status") == "ok"

    def list_topics(self) -> Optional[list]:
        response = self._send_command({"cmd": "list_topics"})
        if response is None or response.get("status") != "ok":
            return None
        return response.get("topics", [])

    def publish_solution(self, topic: str, solution: Solution) -> Optional[dict]:
        """
        Publish a solution on a topic.

        Parameters
        ----------
        topic : str
            Absolute topic name.
        solution : Solution
            Solution to send.

        Returns
        -------
        Optional[dict]
            {"status": "ok", "delivered": int} or an error response;
            None on communication error.
        """
        return self._send_command(
            {"cmd": "publish", "topic": topic, "msg": solution.to_dict()}
        )

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
