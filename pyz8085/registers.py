"""Implementation of the register file shared by the Z80 and 8085 cores."""

from .variants import Z80

__all__ = [ "RegisterFile" ]

BYTE_REGISTERS   = ("A", "F", "B", "C", "D", "E", "H", "L", "SPH", "SPL", "PCH", "PCL")
INDEX_REGISTERS  = ("IXH", "IXL", "IYH", "IYL")
SHADOW_REGISTERS = ("_A", "_F", "_B", "_C", "_D", "_E", "_H", "_L")
PAIRS            = ("AF", "BC", "DE", "HL")
WORD_REGISTERS   = ("SP", "PC")
INDEX_PAIRS      = ("IX", "IY")

class RegisterFile(object):
    """This is an emulation of the register file, which will respond to both 8 and 16-bit register names
    as attributes, and supports the ex and exx instructions. The layout of the flags in F is taken from the
    architecture variant, as is the presence of the index registers and the shadow set: on a variant which
    lacks them their names raise AttributeError just like any other unknown register."""
    def __init__(self, variant=Z80):
        byte_names = BYTE_REGISTERS
        word_names = WORD_REGISTERS
        if variant.index_registers:
            byte_names += INDEX_REGISTERS
            word_names += INDEX_PAIRS
        if variant.shadow_registers:
            byte_names += SHADOW_REGISTERS
        super(RegisterFile, self).__setattr__("variant", variant)
        super(RegisterFile, self).__setattr__("byte_names", byte_names)
        super(RegisterFile, self).__setattr__("word_names", word_names)
        for name in byte_names:
            super(RegisterFile, self).__setattr__(name, 0x00)

    def _require_shadow(self):
        if not self.variant.shadow_registers:
            raise AttributeError("The {} has no shadow registers".format(self.variant.name))

    def ex(self):
        """Exchange A and F with A' and F'"""
        self._require_shadow()
        (a, f) = (self.A, self.F)
        (self.A, self.F) = (self._A, self._F)
        (self._A, self._F) = (a,f)

    def exx(self):
        """Exchange BC, DE, and HL with BC', DE', and HL'"""
        self._require_shadow()
        (b, c, d, e, h, l) = (self.B, self.C, self.D, self.E, self.H, self.L)
        (self.B, self.C, self.D, self.E, self.H, self.L) = (self._B, self._C, self._D, self._E, self._H, self._L)
        (self._B, self._C, self._D, self._E, self._H, self._L) = (b, c, d, e, h, l)

    def exchange_shadow(self):
        """Exchange the whole primary set of 8-bit registers and flags with the shadow set."""
        self._require_shadow()
        primary = tuple(getattr(self, name[1:]) for name in SHADOW_REGISTERS)
        shadow  = tuple(getattr(self, name) for name in SHADOW_REGISTERS)
        for (name, value) in zip(SHADOW_REGISTERS, primary):
            super(RegisterFile, self).__setattr__(name, value)
        for (name, value) in zip(SHADOW_REGISTERS, shadow):
            super(RegisterFile, self).__setattr__(name[1:], value)

    def increment(self, name):
        """Increment a 16-bit register, wrapping, without touching the flags."""
        setattr(self, name, getattr(self, name) + 1)

    def decrement(self, name):
        """Decrement a 16-bit register, wrapping, without touching the flags."""
        setattr(self, name, getattr(self, name) - 1)

    def getflag(self, name):
        """Return the value of the named flag (S, Z, H, P, V, N or C, or AC and CY on the 8085)"""
        return (self.F >> self.variant.flag_bit(name))&0x1

    def setflag(self, name):
        """Set the named flag"""
        self.F |= 1 << self.variant.flag_bit(name)

    def resetflag(self, name):
        """Reset the named flag"""
        self.F &= 0xFF - (1 << self.variant.flag_bit(name))

    def setflags(self, flags):
        """Apply a mapping of flag names to values, flags which aren't mentioned are left alone."""
        for (name, value) in flags.items():
            if value:
                self.setflag(name)
            else:
                self.resetflag(name)

    def flags(self):
        return dict((name, self.getflag(name)) for name in self.variant.flag_bits)

    def snapshot(self):
        """Return a dictionary of every register value."""
        values = dict((name, getattr(self, name)) for name in self.byte_names)
        values.update((name, getattr(self, name)) for name in PAIRS + self.word_names)
        return values

    def __getattr__(self, name):
        if name == "AF":
            return self.A << 8 | self.F
        elif name == "BC":
            return self.B << 8 | self.C
        elif name == "DE":
            return self.D << 8 | self.E
        elif name == "HL":
            return self.H << 8 | self.L
        elif name == "IX" and self.variant.index_registers:
            return self.IXH << 8 | self.IXL
        elif name == "IY" and self.variant.index_registers:
            return self.IYH << 8 | self.IYL
        elif name == "SP":
            return self.SPH << 8 | self.SPL
        elif name == "PC":
            return self.PCH << 8 | self.PCL
        raise AttributeError(name)

    def __setattr__(self, name, value):
        if not isinstance(value, int):
            raise TypeError("Attempt to set register {} to invalid value {!r}".format(name, value))
        if name in PAIRS:
            super(RegisterFile, self).__setattr__(name[0], (value >> 8)&0xFF)
            super(RegisterFile, self).__setattr__(name[1], value&0xFF)
        elif name in self.word_names:
            super(RegisterFile, self).__setattr__(name + "H", (value >> 8)&0xFF)
            super(RegisterFile, self).__setattr__(name + "L", value&0xFF)
        elif name in self.byte_names:
            super(RegisterFile,self).__setattr__(name, value&0xFF)
        else:
            raise AttributeError(name)

    def registermap(self):
        """Return a string which is a diagram illustrating the current state of the registers."""
        names = sorted(self.variant.flag_bits, key=lambda n : -self.variant.flag_bits[n])
        flags = ' '.join("%s=%d" % (name, self.getflag(name)) for name in names)
        if not self.variant.shadow_registers:
            return """\
  +------+------+
 A| 0x%02X | 0x%02X |F
 B| 0x%02X | 0x%02X |C
 D| 0x%02X | 0x%02X |E
 H| 0x%02X | 0x%02X |L
  +------+------+
SP|    0x%04X   |
PC|    0x%04X   |
  +-------------+
%s
""" % (self.A, self.F,
           self.B, self.C,
           self.D, self.E,
           self.H, self.L,
           self.SP,
           self.PC,
           flags)

        return """\
  +------+------+    +------+------+
 A| 0x%02X | 0x%02X |F A'| 0x%02X | 0x%02X |F'
 B| 0x%02X | 0x%02X |C B'| 0x%02X | 0x%02X |C'
 D| 0x%02X | 0x%02X |E D'| 0x%02X | 0x%02X |E'
 H| 0x%02X | 0x%02X |L H'| 0x%02X | 0x%02X |L'
  +------+------+    +------+------+
IX|    0x%04X   |
IY|    0x%04X   |
SP|    0x%04X   |
PC|    0x%04X   |
  +-------------+
%s
""" % (self.A, self.F, self._A, self._F,
           self.B, self.C, self._B, self._C,
           self.D, self.E, self._D, self._E,
           self.H, self.L, self._H, self._L,
           self.IX,
           self.IY,
           self.SP,
           self.PC,
           flags)
