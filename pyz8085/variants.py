"""Architecture variants supported by the simulator.

The Z80 and the 8085 share almost all of their single byte opcodes and the
same register model, so rather than have two cpu classes the differences are
captured here in a small value which is chosen once when a cpu is constructed
and consulted by the register file, the alu and the instruction decoder."""

__all__ = [ "Variant", "Z80", "I8085", "VARIANTS", "get_variant" ]

class Variant (object):
    """Description of one architecture.

    - 'flag_bits' maps each flag letter to its bit position in F
    - 'overflow' is True if the P/V flag reports signed overflow for arithmetic
    - 'subtract_flag' is True if the architecture has an N flag
    - 'index_registers' and 'shadow_registers' mark the Z80 extensions"""

    def __init__(self, name, flag_bits, overflow=False, subtract_flag=False, index_registers=False, shadow_registers=False, aliases=None):
        self.name             = name
        self.flag_bits        = dict(flag_bits)
        self.overflow         = overflow
        self.subtract_flag    = subtract_flag
        self.index_registers  = index_registers
        self.shadow_registers = shadow_registers
        self.aliases          = dict(aliases or {})

    def flag_bit(self, name):
        """Return the bit position of the named flag, raising KeyError for flags this variant lacks."""
        name = self.aliases.get(name, name)
        return self.flag_bits[name]

    def __repr__(self):
        return "Variant({!r})".format(self.name)

Z80 = Variant("z80",
              { 'S' : 7, 'Z' : 6, 'H' : 4, 'P' : 2, 'N' : 1, 'C' : 0 },
              overflow=True,
              subtract_flag=True,
              index_registers=True,
              shadow_registers=True,
              aliases={ 'V' : 'P' })

I8085 = Variant("8085",
                { 'S' : 7, 'Z' : 6, 'H' : 4, 'P' : 2, 'C' : 0 },
                aliases={ 'AC' : 'H', 'CY' : 'C' })

VARIANTS = { "z80" : Z80, "8085" : I8085, "i8085" : I8085 }

def get_variant(variant):
    """Accept either a Variant or one of the names in VARIANTS."""
    if isinstance(variant, Variant):
        return variant
    try:
        return VARIANTS[str(variant).lower()]
    except KeyError:
        raise ValueError("Unknown architecture variant {!r}".format(variant))
