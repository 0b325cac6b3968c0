"""TCP connect port prober with an optional minimal HTTP probe."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Callable, Iterable

from .config import PortScanConfig
from .constants import PROBE_READ_BYTES
from .types import JSONDict


logger = logging.getLogger(__name__)

BeforeScanHook = Callable[[str, int], None]
AfterScanHook = Callable[["PortInfo"], None]


@dataclass(frozen=True, slots=True)
class PortInfo:
    """Outcome of probing one port."""

    port: int
    open: bool
    response: bytes = b""
    error: str | None = None

    @property
    def size(self) -> int:
        return len(self.response)

    def to_json(self) -> JSONDict:
        return {
            "port": self.port,
            "open": self.open,
            "size": self.size,
            "response": self.response.decode("latin-1"),
            "error": self.error,
        }


def parse_port_spec(spec: str) -> list[int]:
    """Parse `22,80,8000-8010` into a sorted, de-duplicated port list."""

    ports: set[int] = set()
    for chunk in spec.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        start_text, sep, end_text = chunk.partition("-")
        try:
            start = int(start_text)
            end = int(end_text) if sep else start
        except ValueError as exc:
            raise ValueError(f"Invalid port spec chunk: {chunk!r}") from exc
        if start > end:
            raise ValueError(f"Invalid port range: {chunk!r}")
        for port in (start, end):
            if not 0 < port < 65536:
                raise ValueError(f"Port out of range: {port}")
        ports.update(range(start, end + 1))
    return sorted(ports)


class PortScanner:
    """Probe ports sequentially; callers may parallelise across instances."""

    def __init__(
        self,
        config: PortScanConfig | None = None,
        *,
        before_scan: BeforeScanHook | None = None,
        after_scan: AfterScanHook | None = None,
    ) -> None:
        self.config = config or PortScanConfig()
        self.before_scan = before_scan
        self.after_scan = after_scan

    def probe(self, host: str, port: int) -> PortInfo:
        """Connect to `host:port`; read whatever the service sends back.

        A refused or timed-out connect means closed. Read errors on an open
        port are reported on `PortInfo.error`.
        """

        try:
            conn = socket.create_connection(
                (host, port),
                timeout=self.config.connect_timeout_seconds,
            )
        except OSError as exc:
            logger.debug("%s:%d closed: %s", host, port, exc)
            return PortInfo(port=port, open=False)

        with conn:
            conn.settimeout(self.config.read_timeout_seconds)
            try:
                if self.config.send_probe:
                    conn.sendall(f"GET / HTTP/1.0\r\nHost: {host}\r\n\r\n".encode("ascii"))
                response = conn.recv(PROBE_READ_BYTES)
            except OSError as exc:
                return PortInfo(port=port, open=True, error=f"{exc.__class__.__name__}: {exc}")

        return PortInfo(port=port, open=True, response=response)

    def scan_ports(self, host: str, ports: Iterable[int]) -> list[PortInfo]:
        results: list[PortInfo] = []
        for port in ports:
            if self.before_scan is not None:
                self.before_scan(host, port)
            info = self.probe(host, port)
            results.append(info)
            if self.after_scan is not None:
                self.after_scan(info)
        return results

    def scan_range(self, host: str, start: int, end: int) -> list[PortInfo]:
        """Probe every port in the inclusive range [start, end]."""

        if start > end:
            raise ValueError(f"Invalid port range: {start}-{end}")
        return self.scan_ports(host, range(start, end + 1))


__all__ = ["PortInfo", "PortScanner", "parse_port_spec"]
