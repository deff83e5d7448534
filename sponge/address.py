"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import socket

from .util import TaggedError


def _resolve(node: str, service: str, flags: int) -> tuple[int, tuple]:
    """Resolve ``node``/``service`` to the first IPv4 (family, sockaddr) pair."""
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(
            f"getaddrinfo({node}, {service})", exc.errno, exc.strerror or str(exc)
        ) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _, _, _, sockaddr = results[0]
    return family, sockaddr


class Address:
    """A socket address: an IPv4 address and a port."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, host: str, port: int = 0) -> None:
        """Build from a dotted-quad string and a numeric port, without any lookup."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        self._family, self._sockaddr = _resolve(
            host, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        )

    @classmethod
    def _from_sockaddr(cls, family: int, sockaddr: tuple) -> Address:
        address = cls.__new__(cls)
        address._family = family
        address._sockaddr = tuple(sockaddr)
        return address

    @classmethod
    def from_service(cls, hostname: str, service: str) -> Address:
        """Resolve a host name and a service name (such as ``"http"``)."""
        family, sockaddr = _resolve(hostname, service, socket.AI_ALL)
        return cls._from_sockaddr(family, sockaddr)

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Build an address with port 0 from a 32-bit numeric IPv4 address."""
        if not 0 <= ip_address <= 0xFFFFFFFF:
            raise ValueError(f"not a 32-bit address: {ip_address}")
        ip = socket.inet_ntoa(ip_address.to_bytes(4, "big"))
        return cls._from_sockaddr(socket.AF_INET, (ip, 0))

    def ip_port(self) -> tuple[str, int]:
        """The numeric IP address string and the port."""
        try:
            host, port = socket.getnameinfo(
                self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno, exc.strerror or str(exc)) from exc
        return host, int(port)

    def ip(self) -> str:
        """The dotted-quad IP address string."""
        return self.ip_port()[0]

    def port(self) -> int:
        """The numeric port."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as an integer in host order."""
        if self._family != socket.AF_INET or len(self._sockaddr) != 2:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int.from_bytes(socket.inet_aton(self._sockaddr[0]), "big")

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        ip, port = self.ip_port()
        return f"Address({ip!r}, {port})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))