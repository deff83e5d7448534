"""File descriptors for existing persistent Linux TUN and TAP devices."""

from __future__ import annotations

import fcntl
import os
import struct

from .file_descriptor import FileDescriptor
from .util import UnixError

CLONEDEV = "/dev/net/tun"

TUNSETIFF = 0x400454CA
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
IFNAMSIZ = 16
_IFREQ_SIZE = 40


def _ifreq(devname: str, is_tun: bool) -> bytes:
    """A ``struct ifreq`` naming ``devname`` with TUN or TAP flags and no packet info."""
    name = devname.encode()[: IFNAMSIZ - 1]
    flags = (IFF_TUN if is_tun else IFF_TAP) | IFF_NO_PI
    request = struct.pack(f"{IFNAMSIZ}sH", name, flags)
    return request.ljust(_IFREQ_SIZE, b"\0")


class TunTapFD(FileDescriptor):
    """A file descriptor attached to an existing TUN (IP) or TAP (Ethernet) device."""

    def __init__(self, devname: str, is_tun: bool) -> None:
        try:
            fd = os.open(CLONEDEV, os.O_RDWR)
        except OSError as exc:
            raise UnixError("open", exc.errno or 0) from exc
        super().__init__(fd)
        try:
            fcntl.ioctl(self.fd_num(), TUNSETIFF, _ifreq(devname, is_tun))
        except OSError as exc:
            self.close()
            raise UnixError("ioctl", exc.errno or 0) from exc


class TunFD(TunTapFD):
    """A file descriptor attached to an existing TUN device (carries IP datagrams)."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A file descriptor attached to an existing TAP device (carries Ethernet frames)."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)