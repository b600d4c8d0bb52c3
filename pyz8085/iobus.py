"""An implementation of an emulation of the io bus expected by both processors.

IN and OUT instructions carry an 8-bit port number which is used to identify
the device which will respond. The core holds no port state of its own, it only
routes each access to the device which claims the port."""

import logging

__all__ = [ "IOBus", "Device", "CallbackDevice" ]

logger = logging.getLogger(__name__)

class IOBus (object):
    """This class represents an io bus."""

    def __init__(self, devices=None):
        """Devices should be a list of devices to connect to the bus."""
        self.devices = list(devices or [])

    def read(self, port):
        """Read from the specified port, a port nothing responds to reads as 0xFF."""
        for device in self.devices:
            if device.responds_to_port(port):
                return device.read(port)&0xFF
        logger.warning("Read from unclaimed port 0x%02X", port)
        return 0xFF

    def write(self, port, data):
        """Write to the specified port."""
        for device in self.devices:
            if device.responds_to_port(port):
                device.write(port, data)
                return
        logger.warning("Write of 0x%02X to unclaimed port 0x%02X dropped", data, port)

class Device (object):
    def responds_to_port(self, port):
        """Override this in derived classes to return true for the correct ports."""
        return False

    def read(self, port):
        """Default implementation just returns 0."""
        return 0x00

    def write(self, port, data):
        """Default implementation does nothing."""
        pass

class CallbackDevice (Device):
    """A device which hands accesses to the given ports on to plain callables:
    read(port) -> int and write(port, data)."""

    def __init__(self, ports, read=None, write=None):
        self.ports   = frozenset(ports)
        self._read   = read
        self._write  = write

    def responds_to_port(self, port):
        return port in self.ports

    def read(self, port):
        if self._read is None:
            return super(CallbackDevice, self).read(port)
        return self._read(port)

    def write(self, port, data):
        if self._write is not None:
            self._write(port, data)
