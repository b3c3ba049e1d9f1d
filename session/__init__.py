"""Transfer results package for serial-modem.

This package turns the final state of a transfer into something to show:
- result: TransferResult statistics and ExitCode mapping
- report: Report ABC and the TransferReport printed by the runners
"""

from session.report import TransferReport
from session.result import ExitCode, TransferResult

__all__ = [
    "ExitCode",
    "TransferReport",
    "TransferResult",
]
