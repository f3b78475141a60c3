from __future__ import annotations

import socket
import threading
import typing

from dummyserver.socketserver import SocketServerThread


class ReceivedRequest(typing.NamedTuple):
    request_line: bytes
    headers: list[bytes]
    body: bytes

    @property
    def method(self) -> bytes:
        return self.request_line.split(b" ")[0]

    @property
    def target(self) -> bytes:
        return self.request_line.split(b" ")[1]

    def header(self, name: str) -> bytes | None:
        name_bytes = name.lower().encode("ascii")
        for line in self.headers:
            key, _, value = line.partition(b":")
            if key.strip().lower() == name_bytes:
                return value.strip()
        return None


def consume_socket(sock: socket.socket, chunks: int = 65536) -> bytearray:
    consumed = bytearray()
    while True:
        b = sock.recv(chunks)
        assert isinstance(b, bytes)
        consumed += b
        if not b or b.endswith(b"\r\n\r\n"):
            break
    return consumed


def read_request(sock: socket.socket) -> ReceivedRequest:
    """Read one whole HTTP/1.1 request, body included, from ``sock``."""
    fp = sock.makefile("rb")
    try:
        request_line = fp.readline().rstrip(b"\r\n")
        headers = []
        while True:
            line = fp.readline()
            if line in (b"\r\n", b"\n", b""):
                break
            headers.append(line.rstrip(b"\r\n"))
        received = ReceivedRequest(request_line, headers, b"")

        length = received.header("Content-Length")
        if length is not None:
            body = fp.read(int(length))
        elif received.header("Transfer-Encoding") == b"chunked":
            body = b""
            while True:
                size = int(fp.readline().strip(), 16)
                chunk = fp.read(size + 2)[:size]
                if size == 0:
                    break
                body += chunk
        else:
            body = b""
        return received._replace(body=body)
    finally:
        fp.close()


class SocketDummyServerTestCase:
    """
    A simple socket-based server is created for this class that is good for
    exactly the requests its socket handler answers.
    """

    scheme = "http"
    host = "127.0.0.1"

    server_thread: typing.ClassVar[SocketServerThread]
    port: typing.ClassVar[int]

    @classmethod
    def _start_server(
        cls, socket_handler: typing.Callable[[socket.socket], None]
    ) -> None:
        ready_event = threading.Event()
        cls.server_thread = SocketServerThread(
            socket_handler=socket_handler, ready_event=ready_event, host=cls.host
        )
        cls.server_thread.start()
        ready_event.wait(5)
        if not ready_event.is_set():
            raise Exception("most likely failed to start server")
        cls.port = cls.server_thread.port

    @classmethod
    def start_response_handler(
        cls, response: bytes, num: int = 1
    ) -> list[ReceivedRequest]:
        """Answer ``num`` requests, each on its own connection, with ``response``.

        Returns the list the received requests are appended to.
        """
        received: list[ReceivedRequest] = []

        def socket_handler(listener: socket.socket) -> None:
            for _ in range(num):
                sock = listener.accept()[0]
                received.append(read_request(sock))
                sock.sendall(response)
                sock.close()

        cls._start_server(socket_handler)
        return received

    @classmethod
    def start_basic_handler(cls, num: int = 1) -> list[ReceivedRequest]:
        return cls.start_response_handler(
            b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\nConnection: close\r\n\r\n",
            num,
        )

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    @classmethod
    def teardown_class(cls) -> None:
        if hasattr(cls, "server_thread"):
            cls.server_thread.join(0.1)

    def teardown_method(self) -> None:
        if hasattr(self, "server_thread"):
            self.server_thread.join(5)
