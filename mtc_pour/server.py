"""
TCP bridge that publishes solutions received from remote planners onto the
local message bus.
"""

import json
import logging
import socket
import struct
import threading
from typing import Optional

from mtc_pour.core.messages import Solution
from mtc_pour.transport import MessageBus

logger = logging.getLogger(__name__)


class SolutionBridgeServer:
    """
    Accepts planner connections and forwards their messages to a bus.

    Protocol:
    - Commands are JSON messages terminated by newline
    - Responses are JSON messages terminated by newline

    Commands:
    - {"cmd": "ping"} -> {"status": "ok"}
    - {"cmd": "list_topics"} -> topics that currently have subscribers
    - {"cmd": "publish", "topic": "/abs/name", "msg": {...solution...}} -> publish a
      solution; the response carries the number of subscribers reached and
      is sent after the subscribers have returned
    """

    def __init__(self, bus: MessageBus, host: str = "localhost", port: int = 8010):
        """
        Initialize bridge server.

        Parameters
        ----------
        bus : MessageBus
            Bus that receives published messages.
        host : str
            Address to bind.
        port : int
            Port to bind; 0 picks a free port.
        """
        self.bus = bus
        self.host = host
        self.port = port
        self.server_socket = None
        self.running = False
        self.server_thread = None
        self.published = 0

    def start(self):
        """Start accepting connections in a background thread."""
        self.server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Release the port immediately on close
        try:
            self.server_socket.setsockopt(
                socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0)
            )
        except (AttributeError, OSError):
            pass

        self.server_socket.bind((self.host, self.port))
        self.port = self.server_socket.getsockname()[1]
        self.server_socket.listen(1)
        self.server_socket.settimeout(0.5)
        self.running = True

        self.server_thread = threading.Thread(
            target=self._accept_connections, daemon=True, name="BridgeConnectionThread"
        )
        self.server_thread.start()
        logger.info("Solution bridge listening on %s:%d", self.host, self.port)

    def stop(self):
        """Stop the server and wait for the accept loop to end."""
        self.running = False
        if self.server_socket:
            try:
                self.server_socket.close()
            except OSError:
                pass
            self.server_socket = None
        if self.server_thread and self.server_thread is not threading.current_thread():
            self.server_thread.join(timeout=2.0)
        logger.info("Solution bridge stopped")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def _accept_connections(self):
        """Accept client connections one at a time."""
        while self.running:
            try:
                client_socket, address = self.server_socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self.running:
                    logger.error("Connection handler error: %s", e)
                break

            logger.info("Planner connected from %s", address)
            try:
                self._handle_client(client_socket)
            except Exception:
                logger.exception("Unexpected error while serving planner")

    def _handle_client(self, client_socket):
        """Serve newline-delimited commands until the client disconnects."""
        buffer = b""
        client_socket.settimeout(None)

        try:
            while self.running:
                data = client_socket.recv(4096)
                if not data:
                    break

                buffer += data
                while b"\n" in buffer:
                    raw, buffer = buffer.split(b"\n", 1)
                    try:
                        line = raw.decode("utf-8")
                    except UnicodeDecodeError as e:
                        response = {"status": "error", "message": f"Invalid UTF-8: {e}"}
                    else:
                        if not line.strip():
                            continue
                        response = self.handle_line(line)
                    client_socket.sendall((json.dumps(response) + "\n").encode("utf-8"))
        except OSError as e:
            logger.warning("Client connection error: %s", e)
        finally:
            try:
                client_socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            client_socket.close()
            logger.info("Planner disconnected")

    def handle_line(self, line: str) -> dict:
        """
        Process one command line.

        Parameters
        ----------
        line : str
            JSON-encoded command.

        Returns
        -------
        dict
            Response message.
        """
        try:
            command = json.loads(line)
        except json.JSONDecodeError as e:
            return {"status": "error", "message": f"Invalid JSON: {e}"}
        if not isinstance(command, dict):
            return {"status": "error", "message": "Command must be a JSON object"}

        cmd = command.get("cmd")
        if cmd == "ping":
            return {"status": "ok"}
        if cmd == "list_topics":
            return {"status": "ok", "topics": self.bus.topics()}
        if cmd == "publish":
            return self._cmd_publish(command)
        return {"status": "error", "message": f"Unknown command: {cmd}"}

    def _cmd_publish(self, command: dict) -> dict:
        topic = command.get("topic")
        data = command.get("msg")
        if not topic or not isinstance(data, dict):
            return {"status": "error", "message": "publish needs 'topic' and 'msg'"}

        if not isinstance(topic, str) or not topic.startswith("/"):
            return {"status": "error", "message": f"Topic must be an absolute name: {topic!r}"}

        try:
            solution = Solution.from_dict(data)
        except (AttributeError, TypeError, ValueError) as e:
            return {"status": "error", "message": f"Malformed solution: {e}"}

        try:
            delivered = self.bus.publish(topic, solution)
        except Exception as e:
            logger.exception("Subscriber failed on %s", topic)
            return {"status": "error", "message": f"Subscriber failed: {e}"}

        self.published += 1
        return {"status": "ok", "delivered": delivered}


def serve(bus: MessageBus, host: str, port: int) -> Optional[SolutionBridgeServer]:
    """Start a bridge server, returning None if the port cannot be bound."""
    server = SolutionBridgeServer(bus, host, port)
    try:
        server.start()
    except OSError as e:
        logger.error("Cannot start solution bridge on %s:%d: %s", host, port, e)
        return None
    return server
