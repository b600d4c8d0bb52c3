"""An implementation of an emulation of the memory bus expected by both
processors.

Each processor has a 16-bit address bus and 8-bit data bus, which allows the
addressing of up to 64KB of memory as individual octets. 16-bit values are
stored little endian, the low byte at the lower address.

Address arithmetic always wraps round the end of the address space, so there
are no invalid addresses."""

import logging

__all__ = [ "MemoryBus" ]

logger = logging.getLogger(__name__)

class MemoryBus (object):
    """This class represents a memory bus backed by a single flat block of 64KB of RAM."""
    size = 0x10000

    def __init__(self):
        self.data = bytearray(self.size)

    def read(self, address):
        """Read from the specified address."""
        return self.data[address&0xFFFF]

    def write(self, address, data):
        """Write to the specified address."""
        self.data[address&0xFFFF] = data&0xFF

    read8  = read
    write8 = write

    def read16(self, address):
        """Read a little endian word, low byte from address and high byte from address + 1."""
        return self.read(address) | (self.read(address + 1) << 8)

    def write16(self, address, data):
        self.write(address, data&0xFF)
        self.write(address + 1, (data >> 8)&0xFF)

    def load(self, origins):
        """Load a program. 'origins' should be a mapping of start addresses to sequences of byte values, as
        would be produced by the ORG directives of an assembly listing."""
        for origin in sorted(origins):
            data = list(origins[origin])
            logger.debug("Loading %d bytes at 0x%04X", len(data), origin&0xFFFF)
            for (n, byte) in enumerate(data):
                self.write(origin + n, byte)

    def dump(self, address, length):
        """Return a copy of a region of memory as bytes."""
        return bytes(self.read(address + n) for n in range(0, length))
