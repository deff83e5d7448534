"""Socket handles built on FileDescriptor: UDP, TCP and Unix-domain stream sockets."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Union

from .address import Address
from .buffer import Buffer, BufferList, BufferViewList
from .file_descriptor import FileDescriptor
from .util import UnixError

Payload = Union[bytes, bytearray, memoryview, str, Buffer, BufferList, BufferViewList]


@contextmanager
def _syscall(attempt: str) -> Iterator[None]:
    """Turn an OSError raised inside the block into a UnixError naming ``attempt``."""
    try:
        yield
    except UnixError:
        raise
    except OSError as exc:
        raise UnixError(attempt, exc.errno or 0) from exc


def _new_socket_fd(domain: int, sock_type: int) -> FileDescriptor:
    with _syscall("socket"):
        sock = socket.socket(domain, sock_type, 0)
    return FileDescriptor(sock.detach())


def _make_address(family: int, sockaddr) -> Address:
    if family == socket.AF_INET:
        return Address(sockaddr[0], sockaddr[1])
    if not isinstance(sockaddr, tuple):
        sockaddr = (sockaddr,)
    return Address._from_sockaddr(family, sockaddr)


def _iovecs(payload: Payload) -> list[memoryview]:
    views = payload if isinstance(payload, BufferViewList) else BufferViewList(payload)
    return views.as_iovecs()


class Socket(FileDescriptor):
    """Base class for network sockets; shares the descriptor it is built from."""

    def __init__(self, fd: FileDescriptor, domain: int, sock_type: int) -> None:
        """Take over ``fd``, checking that it is a socket of ``domain`` and ``sock_type``."""
        self._internal_fd = fd._internal_fd
        with self._borrow("getsockopt") as sock:
            actual_domain = sock.family
            actual_type = sock.type
        if actual_domain != domain:
            raise RuntimeError("socket domain mismatch")
        if actual_type != sock_type:
            raise RuntimeError("socket type mismatch")

    @contextmanager
    def _borrow(self, attempt: str) -> Iterator[socket.socket]:
        """A temporary socket object over this descriptor that never closes it."""
        with _syscall(attempt):
            sock = socket.socket(fileno=self.fd_num())
        try:
            with _syscall(attempt):
                yield sock
        finally:
            sock.detach()

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        with self._borrow("bind") as sock:
            sock.bind(address.ip_port())

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._borrow("connect") as sock:
            sock.connect(address.ip_port())

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        with self._borrow("shutdown") as sock:
            sock.shutdown(how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The address this socket is bound to."""
        with self._borrow("getsockname") as sock:
            return _make_address(sock.family, sock.getsockname())

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        with self._borrow("getpeername") as sock:
            return _make_address(sock.family, sock.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (SO_REUSEADDR)."""
        with self._borrow("setsockopt") as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A received datagram and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    def __init__(self) -> None:
        """An unbound, unconnected UDP socket."""
        super().__init__(_new_socket_fd(socket.AF_INET, socket.SOCK_DGRAM),
                         socket.AF_INET, socket.SOCK_DGRAM)

    @classmethod
    def _from_fd(cls, fd: FileDescriptor) -> UDPSocket:
        sock = cls.__new__(cls)
        Socket.__init__(sock, fd, socket.AF_INET, socket.SOCK_DGRAM)
        return sock

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raise RuntimeError if it is larger than ``mtu``."""
        buffer = bytearray(mtu)
        with self._borrow("recvfrom") as sock:
            length, source = sock.recvfrom_into(buffer, mtu, socket.MSG_TRUNC)
            family = sock.family
        if length > mtu:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(_make_address(family, source), bytes(buffer[:length]))

    def _sendmsg(self, payload: Payload, destination: Address | None) -> None:
        iovecs = _iovecs(payload)
        size = sum(len(view) for view in iovecs)
        with self._borrow("sendmsg") as sock:
            if destination is None:
                sent = sock.sendmsg(iovecs)
            else:
                sent = sock.sendmsg(iovecs, [], 0, destination.ip_port())
        if sent != size:
            raise RuntimeError("datagram payload too big for sendmsg()")
        self._register_write()

    def sendto(self, destination: Address, payload: Payload) -> None:
        """Send a datagram to ``destination``."""
        self._sendmsg(payload, destination)

    def send(self, payload: Payload) -> None:
        """Send a datagram to the connected peer (connect() must come first)."""
        self._sendmsg(payload, None)


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self) -> None:
        """An unbound, unconnected TCP socket."""
        super().__init__(_new_socket_fd(socket.AF_INET, socket.SOCK_STREAM),
                         socket.AF_INET, socket.SOCK_STREAM)

    @classmethod
    def _from_fd(cls, fd: FileDescriptor) -> TCPSocket:
        sock = cls.__new__(cls)
        Socket.__init__(sock, fd, socket.AF_INET, socket.SOCK_STREAM)
        return sock

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting incoming connections."""
        with self._borrow("listen") as sock:
            sock.listen(backlog)

    def accept(self) -> TCPSocket:
        """Block until a connection arrives and return a socket connected to the peer."""
        self._register_read()
        with self._borrow("accept") as sock:
            connection, _ = sock.accept()
        return TCPSocket._from_fd(FileDescriptor(connection.detach()))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(fd, socket.AF_UNIX, socket.SOCK_STREAM)