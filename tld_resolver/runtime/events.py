from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Sequence

from tld_resolver.errors import ResolverError

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_VALUE_LEN = 4096

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Event:
    """An emitted audit event."""

    name: bytes
    args: Dict[str, Any]

    def __getitem__(self, key: str) -> Any:
        return self.args[key]


@dataclass(frozen=True)
class CanonicalEvent:
    """
    Canonical event representation for receipts:

        name: "0x" + hex-encoded event name bytes
        args: sequence of {"k", "t", "v"} dicts
              t="b" => bytes as 0x-prefixed hex
              t="s" => text
              t="i" => integer
              t="z" => boolean
    """

    name: str
    args: Sequence[Mapping[str, Any]]


def _invalid(message: str, **context: Any) -> ResolverError:
    return ResolverError(message, code="event_invalid", context=context)


class EventLog:
    """Append-only, validated event sink owned by one contract instance."""

    def __init__(self) -> None:
        self._events: List[Event] = []

    def _check_name(self, name: Any) -> bytes:
        if not isinstance(name, (bytes, bytearray)):
            raise _invalid("event name must be bytes", where="name_type")
        b = bytes(name)
        if not b or len(b) > MAX_EVENT_NAME_BYTES:
            raise _invalid("event name length out of range", where="name_length", len=len(b))
        return b

    def _check_key(self, key: Any) -> str:
        if not isinstance(key, str) or not key or len(key) > MAX_KEY_LEN:
            raise _invalid("event key must be a short non-empty str", where="key")
        if not _KEY_RE.match(key):
            raise _invalid("event key has invalid characters", where="key_grammar", key=key)
        return key

    def _check_value(self, value: Any) -> Any:
        if isinstance(value, (bytes, bytearray)):
            if len(value) > MAX_VALUE_LEN:
                raise _invalid("event bytes arg too long", where="value_length", len=len(value))
            return bytes(value)
        if isinstance(value, str):
            if len(value.encode("utf-8")) > MAX_VALUE_LEN:
                raise _invalid("event text arg too long", where="value_length")
            return value
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            if value.bit_length() > 256:
                raise _invalid("event int arg out of range", where="value_int_bits")
            return int(value)
        raise _invalid("unsupported event arg type", where="value_type", py_type=type(value).__name__)

    def emit(self, name: bytes, args: Mapping[str, Any]) -> Event:
        bname = self._check_name(name)
        if not isinstance(args, Mapping):
            raise _invalid("event args must be a mapping", where="args_type")
        checked = {self._check_key(k): self._check_value(v) for k, v in args.items()}
        ev = Event(bname, checked)
        self._events.append(ev)
        return ev

    def clear(self) -> None:
        self._events.clear()

    def named(self, name: bytes) -> List[Event]:
        return [e for e in self._events if e.name == name]

    def for_receipt(self) -> List[CanonicalEvent]:
        out: List[CanonicalEvent] = []
        for ev in self._events:
            enc: List[Dict[str, Any]] = []
            for k, v in ev.args.items():
                if isinstance(v, bytes):
                    enc.append({"k": k, "t": "b", "v": "0x" + v.hex()})
                elif isinstance(v, str):
                    enc.append({"k": k, "t": "s", "v": v})
                elif isinstance(v, bool):
                    enc.append({"k": k, "t": "z", "v": v})
                else:
                    enc.append({"k": k, "t": "i", "v": v})
            out.append(CanonicalEvent(name="0x" + ev.name.hex(), args=tuple(enc)))
        return out

    def __iter__(self) -> Iterator[Event]:
        return iter(tuple(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def __getitem__(self, idx: int) -> Event:
        return self._events[idx]


__all__ = [
    "Event",
    "CanonicalEvent",
    "EventLog",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_VALUE_LEN",
]
