"""Transfer reporting for serial-modem.

Contains:
- Report ABC: What the runners print once a transfer ends
- TransferReport: Report after a send or receive completes
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from session.result import TransferResult


class Report(ABC):
    """Printable outcome of a run."""

    @abstractmethod
    def print(self) -> None:
        pass

    @abstractmethod
    def success(self) -> bool:
        pass


@dataclass
class TransferReport(Report):
    """Report after a transfer completes or fails."""

    result: TransferResult

    def print(self) -> None:
        """Print the transfer report."""
        r = self.result
        name = f"{r.variant.value} {r.role.value}"

        if not r.success:
            print(f"Transfer: FAILED ({name}: {r.error})")
            if r.blocks > 0:
                print(f"          ({r.blocks} blocks, {r.bytes_transferred} bytes before failure)")
            return

        print(
            f"Transfer: SUCCESS ({name}: {r.blocks} blocks, {r.bytes_transferred} bytes, "
            f"{r.retries} retries, {r.duplicates} duplicates)"
        )

        if r.elapsed_s > 0 and r.bytes_transferred > 0:
            baud = r.throughput_baud()
            kbps = r.throughput_kbps()
            print(f"Throughput: {baud:,.0f} baud ({kbps:.2f} Kbps) over {r.elapsed_s:.1f}s")

    def success(self) -> bool:
        """Return True if the transfer completed."""
        return self.result.success
