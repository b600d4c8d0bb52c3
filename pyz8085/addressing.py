"""Operand descriptors and the resolution of them to readable and writable
locations.

The opcode tables hold unbound descriptors (eg. "an immediate byte", "memory at
IX plus a displacement"). When an instruction is decoded each descriptor which
takes bytes from the instruction stream is bound to the value found there, and
when it is executed the bound descriptor is resolved against the registers and
memory of a cpu to give a Location."""

from .alu import signed8

__all__ = [ "IMMEDIATE", "REGISTER", "INDIRECT", "INDEXED", "DIRECT", "RELATIVE", "PORT", "CONDITION",
            "Operand", "Immediate", "Register", "Indirect", "Indexed", "Direct", "Relative", "Port", "Condition",
            "RegisterLocation", "MemoryLocation", "ConstantLocation", "resolve" ]

IMMEDIATE = "immediate"
REGISTER  = "register"
INDIRECT  = "indirect"
INDEXED   = "indexed"
DIRECT    = "direct"
RELATIVE  = "relative"
PORT      = "port"
CONDITION = "condition"

MEMORY_MODES = (INDIRECT, INDEXED, DIRECT)

class Operand(object):
    """Base class for operand descriptors. 'size' is the number of bytes the operand takes from the instruction
    stream, 'width' is the width in bytes of the value it refers to."""
    mode  = None
    size  = 0
    width = 1

    def bind(self, field):
        """Return a copy of this descriptor carrying the value read from the instruction stream."""
        return self

    def is_memory(self):
        return self.mode in MEMORY_MODES

    def _key(self):
        return tuple(sorted(vars(self).items()))

    def __eq__(self, other):
        return type(self) == type(other) and self._key() == other._key()

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash((type(self), self._key()))

    def __repr__(self):
        return "{}({})".format(type(self).__name__, ', '.join("{}={!r}".format(k, v) for (k, v) in self._key()))

class Immediate(Operand):
    """A literal value of one or two bytes embedded in the instruction."""
    mode = IMMEDIATE

    def __init__(self, size=1, value=None):
        self.size  = size
        self.width = size
        self.value = value

    def bind(self, field):
        return Immediate(self.size, field)

class Register(Operand):
    """A named 8 or 16-bit register."""
    mode = REGISTER

    def __init__(self, name):
        self.name  = name
        self.width = 2 if name in ("AF", "BC", "DE", "HL", "SP", "PC", "IX", "IY") else 1

class Indirect(Operand):
    """Memory at the address held in a register pair."""
    mode = INDIRECT

    def __init__(self, pair, width=1):
        self.pair  = pair
        self.width = width

class Indexed(Operand):
    """Memory at the address in an index register plus a signed displacement."""
    mode = INDEXED
    size = 1

    def __init__(self, index, displacement=None):
        self.index        = index
        self.displacement = displacement

    def bind(self, field):
        return Indexed(self.index, signed8(field))

class Direct(Operand):
    """Memory at a literal 16-bit address."""
    mode = DIRECT
    size = 2

    def __init__(self, width=1, address=None):
        self.width   = width
        self.address = address

    def bind(self, field):
        return Direct(self.width, field)

class Relative(Operand):
    """A signed displacement from the address of the next instruction."""
    mode = RELATIVE
    size = 1

    def __init__(self, offset=None):
        self.offset = offset

    def bind(self, field):
        return Relative(signed8(field))

class Port(Operand):
    """A literal 8-bit port number."""
    mode = PORT
    size = 1

    def __init__(self, port=None):
        self.port = port

    def bind(self, field):
        return Port(field)

class Condition(Operand):
    """A test of a single flag, met when the flag has the given value."""
    mode = CONDITION

    def __init__(self, flag, value):
        self.flag  = flag
        self.value = value

    def test(self, reg):
        return reg.getflag(self.flag) == self.value

class RegisterLocation(object):
    def __init__(self, reg, name):
        self.reg  = reg
        self.name = name

    def read(self):
        return getattr(self.reg, self.name)

    def write(self, value):
        setattr(self.reg, self.name, value)

class MemoryLocation(object):
    def __init__(self, membus, address, width=1):
        self.membus  = membus
        self.address = address&0xFFFF
        self.width   = width

    def read(self):
        if self.width == 2:
            return self.membus.read16(self.address)
        return self.membus.read(self.address)

    def write(self, value):
        if self.width == 2:
            self.membus.write16(self.address, value)
        else:
            self.membus.write(self.address, value)

class ConstantLocation(object):
    def __init__(self, value):
        self.value = value

    def read(self):
        return self.value

    def write(self, value):
        raise TypeError("Cannot write to a constant operand")

RESOLVERS = {
    IMMEDIATE : lambda cpu, op : ConstantLocation(op.value),
    REGISTER  : lambda cpu, op : RegisterLocation(cpu.reg, op.name),
    INDIRECT  : lambda cpu, op : MemoryLocation(cpu.membus, getattr(cpu.reg, op.pair), op.width),
    INDEXED   : lambda cpu, op : MemoryLocation(cpu.membus, getattr(cpu.reg, op.index) + op.displacement),
    DIRECT    : lambda cpu, op : MemoryLocation(cpu.membus, op.address, op.width),
    RELATIVE  : lambda cpu, op : ConstantLocation(op.offset),
    PORT      : lambda cpu, op : ConstantLocation(op.port),
    }

def resolve(cpu, operand):
    """Return the Location an operand refers to on the given cpu (anything with 'reg' and 'membus' members)."""
    if operand.mode not in RESOLVERS:
        raise ValueError("Operand {!r} does not refer to a location".format(operand))
    return RESOLVERS[operand.mode](cpu, operand)
