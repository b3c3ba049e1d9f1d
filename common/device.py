"""Serial device setup for serial-modem.

Contains:
- configure_ftdi_latency_timer: Lower the FTDI latency timer so single-byte
  ACK/NAK replies are not held back by the USB adapter
- log_device_info: Log information about a serial device
- open_serial: Open and configure a serial port for a transfer
"""

import logging
import os

import serial
import serial.tools.list_ports

logger = logging.getLogger(__name__)

FTDI_LATENCY_TIMER_TARGET = 1

# Reads only happen once in_waiting reports data, so the port never blocks long
READ_TIMEOUT_S = 0.1
WRITE_TIMEOUT_S = 2.0


def configure_ftdi_latency_timer(device: str) -> bool:
    """Set the FTDI latency timer of device to 1ms. Returns True if set."""
    device_name = os.path.basename(device)

    if not device_name.startswith("ttyUSB"):
        logger.debug(f"Latency fix not applicable to {device_name}")
        return False

    sysfs_path = f"/sys/bus/usb-serial/devices/{device_name}/latency_timer"
    if not os.path.exists(sysfs_path):
        logger.warning(f"Cannot configure latency timer: {sysfs_path} not found")
        return False

    try:
        with open(sysfs_path, "r") as f:
            current_value = int(f.read().strip())
        if current_value == FTDI_LATENCY_TIMER_TARGET:
            logger.debug(f"Latency timer already set to {FTDI_LATENCY_TIMER_TARGET}ms")
            return True

        with open(sysfs_path, "w") as f:
            f.write(str(FTDI_LATENCY_TIMER_TARGET))
        with open(sysfs_path, "r") as f:
            new_value = int(f.read().strip())
    except PermissionError:
        logger.warning("Cannot configure latency timer: permission denied (run with sudo)")
        return False
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to configure latency timer: {e}")
        return False

    if new_value != FTDI_LATENCY_TIMER_TARGET:
        logger.warning(
            f"Failed to set latency timer: wrote {FTDI_LATENCY_TIMER_TARGET}, read {new_value}"
        )
        return False

    logger.info(f"Set FTDI latency timer from {current_value}ms to {FTDI_LATENCY_TIMER_TARGET}ms")
    return True


def log_device_info(device: str) -> None:
    """Log information about a serial device."""
    real_path = os.path.realpath(device)
    if real_path.startswith("/dev/pts/"):
        logger.info(f"Device: {device} -> {real_path} (pty)")
        return

    ports = [p for p in serial.tools.list_ports.comports() if p.device == device]
    if not ports:
        logger.info(f"Device: {device} (not in port list)")
        return

    info = ports[0]
    logger.info(f"Device: {info.device} ({info.description})")
    if info.vid is not None:
        logger.info(f"VID:PID: {info.vid:04x}:{info.pid:04x}")


def open_serial(device: str, baudrate: int, rtscts: bool = False) -> serial.Serial:
    """Open a serial port as 8N1 without software flow control.

    XON/XOFF must stay off: 0x11 and 0x13 occur in block payloads.
    """
    log_device_info(device)
    ser = serial.Serial(
        port=device,
        baudrate=baudrate,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_NONE,
        stopbits=serial.STOPBITS_ONE,
        xonxoff=False,
        rtscts=rtscts,
        timeout=READ_TIMEOUT_S,
        write_timeout=WRITE_TIMEOUT_S,
    )
    ser.reset_input_buffer()
    ser.reset_output_buffer()
    logger.debug(f"Serial port: baudrate={ser.baudrate}, rtscts={ser.rtscts}")
    return ser
