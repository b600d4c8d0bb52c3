"""Arithmetic and logic operations.

Every function here is pure: it takes the architecture variant and its
operands (and the incoming carry where one is used) and returns a tuple of
(result, flags) where flags is a dictionary mapping the letter of each flag the
operation affects to its new value. Flags which the operation leaves alone are
simply absent from the dictionary, so the caller can apply it with
RegisterFile.setflags."""

__all__ = [ "parity", "signed8",
            "add", "sub", "compare", "inc", "dec", "add16",
            "and_", "or_", "xor", "cpl", "neg", "daa",
            "rlca", "rrca", "rla", "rra", "scf", "ccf" ]

def parity(x):
    """1 if x has an even number of set bits, otherwise 0"""
    return 1 - (bin(x&0xFF).count('1')&0x1)

def signed8(x):
    x &= 0xFF
    return x - 0x100 if x >= 0x80 else x

def _szp(result):
    return { 'S' : (result >> 7)&0x1,
             'Z' : 1 if result == 0 else 0,
             'P' : parity(result) }

def add(variant, a, b, carry=0):
    """ADD and ADC"""
    total  = a + b + carry
    result = total&0xFF
    flags  = _szp(result)
    flags['H'] = 1 if (a&0xF) + (b&0xF) + carry > 0xF else 0
    flags['C'] = 1 if total > 0xFF else 0
    if variant.overflow:
        flags['P'] = 1 if (~(a ^ b))&(a ^ result)&0x80 else 0
    if variant.subtract_flag:
        flags['N'] = 0
    return (result, flags)

def sub(variant, a, b, borrow=0):
    """SUB and SBC, done as an addition of the two's complement of the subtrahend, after which the carry
    flag means a borrow occurred."""
    total  = a + ((~b)&0xFF) + (1 - borrow)
    result = total&0xFF
    flags  = _szp(result)
    flags['C'] = 0 if total > 0xFF else 1
    if variant.subtract_flag:
        flags['H'] = 1 if (a&0xF) - (b&0xF) - borrow < 0 else 0
        flags['N'] = 1
    else:
        flags['H'] = 1 if (a&0xF) + ((~b)&0xF) + (1 - borrow) > 0xF else 0
    if variant.overflow:
        flags['P'] = 1 if (a ^ b)&(a ^ result)&0x80 else 0
    return (result, flags)

def compare(variant, a, b):
    """CP and CMP: the flags of a subtraction, the accumulator is returned unchanged."""
    return (a, sub(variant, a, b)[1])

def inc(variant, x):
    """INC and INR never affect the carry flag."""
    result = (x + 1)&0xFF
    flags  = _szp(result)
    flags['H'] = 1 if (x&0xF) == 0xF else 0
    if variant.overflow:
        flags['P'] = 1 if x == 0x7F else 0
    if variant.subtract_flag:
        flags['N'] = 0
    return (result, flags)

def dec(variant, x):
    """DEC and DCR never affect the carry flag."""
    result = (x - 1)&0xFF
    flags  = _szp(result)
    if variant.subtract_flag:
        flags['H'] = 1 if (x&0xF) == 0x0 else 0
        flags['N'] = 1
    else:
        flags['H'] = 1 if (x&0xF) != 0x0 else 0
    if variant.overflow:
        flags['P'] = 1 if x == 0x80 else 0
    return (result, flags)

def add16(variant, a, b):
    """ADD HL,rr (and DAD), sign, zero and parity are left alone."""
    total = a + b
    flags = { 'C' : 1 if total > 0xFFFF else 0 }
    if variant.subtract_flag:
        flags['H'] = 1 if (a&0xFFF) + (b&0xFFF) > 0xFFF else 0
        flags['N'] = 0
    return (total&0xFFFF, flags)

def _logical(variant, result):
    flags = _szp(result)
    flags['H'] = 0
    flags['C'] = 0
    if variant.subtract_flag:
        flags['N'] = 0
    return (result, flags)

def and_(variant, a, b):
    return _logical(variant, a&b&0xFF)

def or_(variant, a, b):
    return _logical(variant, (a|b)&0xFF)

def xor(variant, a, b):
    return _logical(variant, (a^b)&0xFF)

def cpl(variant, a):
    """CPL and CMA, no flags are affected."""
    return ((~a)&0xFF, {})

def neg(variant, a):
    return sub(variant, 0, a)

def daa(variant, a, flags):
    """Decimal adjust the accumulator. 'flags' should hold the current values of H and C (and N on the Z80).

    After an addition 6 is added if the low nibble is above 9 or there was a half carry, then 0x60 is added if
    the high nibble of the (possibly already adjusted) value is above 9 or there was a carry. After a
    subtraction on the Z80 the same corrections are subtracted. Bytes which aren't valid BCD are adjusted just
    the same."""
    h = flags.get('H', 0)
    c = flags.get('C', 0)
    n = flags.get('N', 0) if variant.subtract_flag else 0

    result = a
    if n == 0:
        half = 0
        if (result&0xF) > 9 or h:
            half = 1 if (result&0xF) + 0x6 > 0xF else 0
            result += 0x06
        if (result >> 4) > 9 or c:
            result += 0x60
        carry = 1 if (c or result > 0xFF) else 0
    else:
        half  = 1 if (h and (a&0xF) < 0x6) else 0
        carry = 1 if (c or a > 0x99) else 0
        if (a&0xF) > 9 or h:
            result -= 0x06
        if carry:
            result -= 0x60

    result &= 0xFF
    out = _szp(result)
    out['H'] = half
    out['C'] = carry
    return (result, out)

def _rotate_flags(variant, carry):
    flags = { 'C' : carry }
    if variant.subtract_flag:
        flags['H'] = 0
        flags['N'] = 0
    return flags

def rlca(variant, a):
    c = (a >> 7)&0x1
    return (((a << 1) | c)&0xFF, _rotate_flags(variant, c))

def rrca(variant, a):
    c = a&0x1
    return (((a >> 1) | (c << 7))&0xFF, _rotate_flags(variant, c))

def rla(variant, a, carry):
    return (((a << 1) | carry)&0xFF, _rotate_flags(variant, (a >> 7)&0x1))

def rra(variant, a, carry):
    return (((a >> 1) | (carry << 7))&0xFF, _rotate_flags(variant, a&0x1))

def scf(variant):
    return _rotate_flags(variant, 1)

def ccf(variant, carry):
    flags = _rotate_flags(variant, 1 - carry)
    if variant.subtract_flag:
        flags['H'] = carry
    return flags
