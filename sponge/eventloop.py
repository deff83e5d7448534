"""Waiting for readiness on file descriptors and running callbacks for them."""

from __future__ import annotations

import enum
import select
from dataclasses import dataclass, field
from typing import Callable

from .file_descriptor import FileDescriptor
from .util import UnixError

Callback = Callable[[], None]
Interest = Callable[[], bool]


def _always_interested() -> bool:
    return True


def _do_nothing() -> None:
    return None


class Direction(enum.IntEnum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    In = select.POLLIN
    Out = select.POLLOUT


class Result(enum.Enum):
    """The outcome of one call to :meth:`EventLoop.wait_next_event`."""

    Success = enum.auto()
    Timeout = enum.auto()
    Exit = enum.auto()


@dataclass
class Rule:
    """A descriptor to watch, the direction to watch it in and what to do then."""

    fd: FileDescriptor
    direction: Direction
    callback: Callback
    interest: Interest = field(default=_always_interested)
    cancel: Callback = field(default=_do_nothing)

    def service_count(self) -> int:
        """How many times the descriptor has been read (In) or written (Out)."""
        if self.direction == Direction.In:
            return self.fd.read_count()
        return self.fd.write_count()


class EventLoop:
    """Polls the descriptors of its rules and runs the callbacks of those that are ready.

    A rule is cancelled (its ``cancel`` callback runs and it is removed) when its
    descriptor is closed, when an input descriptor has reached EOF, or when the
    only condition reported for it is a hangup.
    """

    def __init__(self) -> None:
        self._rules: list[Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Interest = _always_interested,
        cancel: Callback = _do_nothing,
    ) -> None:
        """Run ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` holds."""
        self._rules.append(
            Rule(fd.duplicate(), Direction(direction), callback, interest, cancel)
        )

    def _cancel(self, rule: Rule) -> None:
        rule.cancel()
        self._rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll once for up to ``timeout_ms`` milliseconds and service the ready rules.

        Raises RuntimeError if a polled descriptor reports an error, or if a
        callback neither read nor wrote its descriptor while its rule stays
        interested (which would make the loop spin).
        """
        polled: list[tuple[Rule, int]] = []
        something_to_poll = False

        for rule in list(self._rules):
            if rule.direction == Direction.In and rule.fd.eof():
                self._cancel(rule)
                continue
            if rule.fd.closed():
                self._cancel(rule)
                continue
            if rule.interest():
                polled.append((rule, int(rule.direction)))
                something_to_poll = True
            else:
                # still registered so that errors are reported
                polled.append((rule, 0))

        if not something_to_poll:
            return Result.Exit

        masks: dict[int, int] = {}
        for rule, events in polled:
            fd_num = rule.fd.fd_num()
            masks[fd_num] = masks.get(fd_num, 0) | events

        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)

        try:
            ready = poller.poll(timeout_ms)
        except InterruptedError:
            return Result.Exit
        except OSError as exc:
            raise UnixError("poll", exc.errno or 0) from exc

        if not ready:
            return Result.Timeout

        revents_by_fd = dict(ready)

        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num(), 0)

            if revents & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # the only condition was a hangup: this descriptor is defunct
                self._cancel(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd "
                        "and is still interested"
                    )

        return Result.Success