"""pytest configuration and fixtures for serial-modem tests.

Provides:
- MockSerialPort: Single-buffer mock for simple unit tests
- ConnectedMockPorts: Bidirectional mock pair for sender/receiver round trips
- ScriptedSerialPort: Mock peer answering each write with a scripted reply
- socat PTY pair fixture for integration tests
- Markers for unit vs integration tests
"""

import io
import re
import subprocess
import sys
import threading
import time
from collections.abc import Generator

import pytest


class MockSerialPort:
    """Mock serial port for unit testing.

    Uses a single buffer shared between read and write operations.
    Data written to the port can be read back immediately.
    """

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self._read_pos = 0
        self._lock = threading.Lock()
        self.flushes = 0

    def write(self, data: bytes) -> int:
        with self._lock:
            pos = self._buffer.tell()
            self._buffer.seek(0, 2)  # Seek to end
            written = self._buffer.write(data)
            self._buffer.seek(pos)
            return written

    def read(self, size: int = 1, /) -> bytes:
        with self._lock:
            self._buffer.seek(self._read_pos)
            data = self._buffer.read(size)
            self._read_pos = self._buffer.tell()
            return data

    def flush(self) -> None:
        self.flushes += 1

    @property
    def in_waiting(self) -> int:
        with self._lock:
            end_pos = self._buffer.seek(0, 2)
            return max(0, end_pos - self._read_pos)

    def inject(self, data: bytes) -> None:
        """Inject data into the buffer as if received from peer."""
        self.write(data)


class ConnectedMockPorts:
    """Bidirectional mock port pair for testing sender-receiver communication.

    Data written to port_a appears in port_b's read buffer and vice versa.
    """

    def __init__(self) -> None:
        self._a_to_b = bytearray()
        self._b_to_a = bytearray()
        self._lock = threading.Lock()
        self.port_a = _ConnectedPort(self, is_port_a=True)
        self.port_b = _ConnectedPort(self, is_port_a=False)


class _ConnectedPort:
    """One end of a ConnectedMockPorts pair."""

    def __init__(self, parent: ConnectedMockPorts, is_port_a: bool) -> None:
        self._parent = parent
        self._is_port_a = is_port_a
        self.written = bytearray()

    def _outgoing(self) -> bytearray:
        return self._parent._a_to_b if self._is_port_a else self._parent._b_to_a

    def _incoming(self) -> bytearray:
        return self._parent._b_to_a if self._is_port_a else self._parent._a_to_b

    def write(self, data: bytes) -> int:
        with self._parent._lock:
            self._outgoing().extend(data)
            self.written.extend(data)
            return len(data)

    def read(self, size: int = 1, /) -> bytes:
        with self._parent._lock:
            buffer = self._incoming()
            data = bytes(buffer[:size])
            del buffer[:size]
            return data

    def flush(self) -> None:
        pass

    @property
    def in_waiting(self) -> int:
        with self._parent._lock:
            return len(self._incoming())

    def inject(self, data: bytes) -> None:
        """Inject data as if it came from the peer."""
        with self._parent._lock:
            self._incoming().extend(data)


class ScriptedSerialPort:
    """Mock peer that answers every write with the next scripted reply.

    initial is readable before anything is written. Once the replies run
    out the peer goes silent. Everything written is kept in written and,
    call by call, in writes.
    """

    def __init__(self, replies: list[bytes] | None = None, initial: bytes = b"") -> None:
        self._rx = bytearray(initial)
        self._replies = list(replies or [])
        self.written = bytearray()
        self.writes: list[bytes] = []
        self.flushes = 0
        self.closed = False

    def write(self, data: bytes) -> int:
        self.written.extend(data)
        self.writes.append(bytes(data))
        if self._replies:
            self._rx.extend(self._replies.pop(0))
        return len(data)

    def read(self, size: int = 1, /) -> bytes:
        data = bytes(self._rx[:size])
        del self._rx[:size]
        return data

    def flush(self) -> None:
        self.flushes += 1

    @property
    def in_waiting(self) -> int:
        return len(self._rx)

    def inject(self, data: bytes) -> None:
        self._rx.extend(data)

    def close(self) -> None:
        self.closed = True


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test (requires socat)")


@pytest.fixture
def mock_port() -> MockSerialPort:
    return MockSerialPort()


@pytest.fixture
def connected_ports() -> ConnectedMockPorts:
    return ConnectedMockPorts()


@pytest.fixture
def scripted_port() -> type[ScriptedSerialPort]:
    """Return the ScriptedSerialPort class so tests can set up replies."""
    return ScriptedSerialPort


@pytest.fixture
def pty_pair() -> Generator[tuple[str, str, subprocess.Popen[str]], None, None]:
    """Create a connected PTY pair using socat.

    Yields (pty1, pty2, socat_process).

    Requires: socat installed and Linux platform.
    """
    if sys.platform != "linux":
        pytest.skip("socat PTY fixture requires Linux")

    try:
        subprocess.run(["which", "socat"], check=True, capture_output=True)
    except (subprocess.CalledProcessError, FileNotFoundError):
        pytest.skip("socat not installed")

    socat = subprocess.Popen(
        ["socat", "-d", "-d", "pty,raw,echo=0", "pty,raw,echo=0"],
        stderr=subprocess.PIPE,
        text=True,
    )

    ptys: list[str] = []
    try:
        for _ in range(20):  # Give socat time to start
            if socat.poll() is not None:
                raise RuntimeError(f"socat exited early with code {socat.returncode}")

            assert socat.stderr is not None
            line = socat.stderr.readline()
            if "PTY is" in line:
                match = re.search(r"/dev/pts/\d+", line)
                if match:
                    ptys.append(match.group())
            if len(ptys) == 2:
                break
            time.sleep(0.05)
        else:
            raise RuntimeError(f"Failed to get PTY pair from socat, got: {ptys}")

        yield ptys[0], ptys[1], socat

    finally:
        if socat.poll() is None:
            socat.terminate()
            socat.wait(timeout=5)
        if socat.stderr:
            socat.stderr.close()
