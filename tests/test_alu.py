import unittest
from pyz8085 import alu
from pyz8085.variants import Z80, I8085

VARIANTS = (Z80, I8085)

def is_bcd(x):
    return (x&0xF) <= 9 and (x >> 4) <= 9

class TestHelpers(unittest.TestCase):
    def test_parity(self):
        self.assertEqual(alu.parity(0x00), 1)
        self.assertEqual(alu.parity(0x01), 0)
        self.assertEqual(alu.parity(0x03), 1)
        self.assertEqual(alu.parity(0x07), 0)
        self.assertEqual(alu.parity(0xFF), 1)

    def test_signed8(self):
        self.assertEqual(alu.signed8(0x00), 0)
        self.assertEqual(alu.signed8(0x7F), 127)
        self.assertEqual(alu.signed8(0x80), -128)
        self.assertEqual(alu.signed8(0xFE), -2)

class TestArithmetic(unittest.TestCase):
    def test_add_carry(self):
        for v in VARIANTS:
            for a in range(0, 256):
                for b in range(0, 256):
                    (result, flags) = alu.add(v, a, b)
                    self.assertEqual(result, (a + b)&0xFF)
                    self.assertEqual(flags['C'], 1 if a + b > 255 else 0, msg="{!r}: {} + {}".format(v, a, b))

    def test_sub_borrow(self):
        for v in VARIANTS:
            for a in range(0, 256):
                for b in range(0, 256):
                    (result, flags) = alu.sub(v, a, b)
                    self.assertEqual(result, (a - b)&0xFF)
                    self.assertEqual(flags['C'], 1 if a < b else 0, msg="{!r}: {} - {}".format(v, a, b))

    def test_add_with_carry(self):
        for v in VARIANTS:
            self.assertEqual(alu.add(v, 0xFF, 0x00, 1), (0x00, alu.add(v, 0xFF, 0x00, 1)[1]))
            (result, flags) = alu.add(v, 0xFF, 0x00, 1)
            self.assertEqual(flags['C'], 1)
            self.assertEqual(flags['Z'], 1)
            self.assertEqual(flags['H'], 1)

    def test_sub_with_borrow(self):
        for v in VARIANTS:
            (result, flags) = alu.sub(v, 0x05, 0x05, 1)
            self.assertEqual(result, 0xFF)
            self.assertEqual(flags['C'], 1)
            (result, flags) = alu.sub(v, 0x06, 0x05, 1)
            self.assertEqual(result, 0x00)
            self.assertEqual(flags['C'], 0)
            self.assertEqual(flags['Z'], 1)

    def test_add_scenario(self):
        for v in VARIANTS:
            (result, flags) = alu.add(v, 0x67, 0xE5)
            self.assertEqual(result, 0x4C)
            self.assertEqual(flags['C'], 1)

    def test_add_half_carry(self):
        for v in VARIANTS:
            self.assertEqual(alu.add(v, 0x29, 0x17)[1]['H'], 1)
            self.assertEqual(alu.add(v, 0x21, 0x17)[1]['H'], 0)

    def test_z80_overflow(self):
        self.assertEqual(alu.add(Z80, 0x7F, 0x01), (0x80, { 'S' : 1, 'Z' : 0, 'H' : 1, 'P' : 1, 'N' : 0, 'C' : 0 }))
        self.assertEqual(alu.add(Z80, 0x80, 0x80)[1]['P'], 1)
        self.assertEqual(alu.add(Z80, 0x10, 0x20)[1]['P'], 0)
        self.assertEqual(alu.sub(Z80, 0x80, 0x01)[1]['P'], 1)
        self.assertEqual(alu.sub(Z80, 0x50, 0x20)[1]['P'], 0)

    def test_8085_parity(self):
        self.assertEqual(alu.add(I8085, 0x7F, 0x01), (0x80, { 'S' : 1, 'Z' : 0, 'H' : 1, 'P' : 0, 'C' : 0 }))
        self.assertEqual(alu.add(I8085, 0x01, 0x02)[1]['P'], 1)

    def test_sub_flags(self):
        self.assertEqual(alu.sub(Z80, 0x10, 0x01), (0x0F, { 'S' : 0, 'Z' : 0, 'H' : 1, 'P' : 0, 'N' : 1, 'C' : 0 }))
        self.assertEqual(alu.sub(I8085, 0x10, 0x01), (0x0F, { 'S' : 0, 'Z' : 0, 'H' : 0, 'P' : 1, 'C' : 0 }))
        self.assertEqual(alu.sub(I8085, 0x20, 0x30), (0xF0, { 'S' : 1, 'Z' : 0, 'H' : 1, 'P' : 1, 'C' : 1 }))

    def test_compare_keeps_value(self):
        for v in VARIANTS:
            for (a, b) in ((0x42, 0x42), (0x42, 0x67), (0x75, 0x42)):
                (result, flags) = alu.compare(v, a, b)
                self.assertEqual(result, a)
                self.assertEqual(flags, alu.sub(v, a, b)[1])
            self.assertEqual(alu.compare(v, 0x42, 0x42)[1]['Z'], 1)
            self.assertEqual(alu.compare(v, 0x42, 0x67)[1]['C'], 1)
            self.assertEqual(alu.compare(v, 0x75, 0x42)[1]['C'], 0)

    def test_inc_dec_inverse(self):
        for v in VARIANTS:
            for x in range(0, 256):
                self.assertEqual(alu.inc(v, alu.dec(v, x)[0])[0], x)
                self.assertEqual(alu.dec(v, alu.inc(v, x)[0])[0], x)
                self.assertNotIn('C', alu.inc(v, x)[1])
                self.assertNotIn('C', alu.dec(v, x)[1])

    def test_inc_dec_wrap(self):
        for v in VARIANTS:
            self.assertEqual(alu.inc(v, 0xFF)[0], 0x00)
            self.assertEqual(alu.inc(v, 0xFF)[1]['Z'], 1)
            self.assertEqual(alu.dec(v, 0x00)[0], 0xFF)
            self.assertEqual(alu.dec(v, 0x01)[1]['Z'], 1)

    def test_inc_dec_z80_flags(self):
        self.assertEqual(alu.inc(Z80, 0x7F)[1], { 'S' : 1, 'Z' : 0, 'H' : 1, 'P' : 1, 'N' : 0 })
        self.assertEqual(alu.dec(Z80, 0x80)[1], { 'S' : 0, 'Z' : 0, 'H' : 1, 'P' : 1, 'N' : 1 })
        self.assertEqual(alu.dec(I8085, 0x0B)[1], { 'S' : 0, 'Z' : 0, 'H' : 1, 'P' : 1 })

    def test_add16(self):
        self.assertEqual(alu.add16(Z80, 0x0FFF, 0x0001), (0x1000, { 'C' : 0, 'H' : 1, 'N' : 0 }))
        self.assertEqual(alu.add16(Z80, 0xFFFF, 0x0001), (0x0000, { 'C' : 1, 'H' : 1, 'N' : 0 }))
        self.assertEqual(alu.add16(I8085, 0xFFFF, 0x0002), (0x0001, { 'C' : 1 }))
        self.assertEqual(alu.add16(I8085, 0x1234, 0x5678), (0x68AC, { 'C' : 0 }))

    def test_neg(self):
        self.assertEqual(alu.neg(Z80, 0x01)[0], 0xFF)
        self.assertEqual(alu.neg(Z80, 0x01)[1]['C'], 1)
        self.assertEqual(alu.neg(Z80, 0x00)[1]['C'], 0)
        self.assertEqual(alu.neg(Z80, 0x80), (0x80, alu.sub(Z80, 0x00, 0x80)[1]))
        self.assertEqual(alu.neg(Z80, 0x80)[1]['P'], 1)

class TestLogic(unittest.TestCase):
    def test_xor_self(self):
        for v in VARIANTS:
            for a in range(0, 256):
                (result, flags) = alu.xor(v, a, a)
                self.assertEqual(result, 0)
                self.assertEqual(flags['C'], 0)
                self.assertEqual(flags['H'], 0)
                self.assertEqual(flags['Z'], 1)

    def test_and_or(self):
        for v in VARIANTS:
            self.assertEqual(alu.and_(v, 0xF5, 0x0F)[0], 0x05)
            self.assertEqual(alu.and_(v, 0xF5, 0xF0)[0], 0xF0)
            self.assertEqual(alu.or_(v, 0x05, 0x80)[0], 0x85)
            self.assertEqual(alu.or_(v, 0x0A, 0x05)[0], 0x0F)
            for op in (alu.and_, alu.or_, alu.xor):
                flags = op(v, 0xFF, 0x5A)[1]
                self.assertEqual(flags['C'], 0)
                self.assertEqual(flags['H'], 0)

    def test_logical_reports_parity_on_z80(self):
        self.assertEqual(alu.or_(Z80, 0x03, 0x00)[1]['P'], 1)
        self.assertEqual(alu.or_(Z80, 0x07, 0x00)[1]['P'], 0)

    def test_cpl(self):
        for v in VARIANTS:
            for a in range(0, 256):
                self.assertEqual(alu.cpl(v, a), ((~a)&0xFF, {}))
        self.assertEqual(alu.cpl(Z80, 0x55)[0], 0xAA)

class TestDecimalAdjust(unittest.TestCase):
    def test_scenario(self):
        for v in VARIANTS:
            (raw, flags) = alu.add(v, 0x29, 0x17)
            self.assertEqual(raw, 0x40)
            (result, flags) = alu.daa(v, raw, flags)
            self.assertEqual(result, 0x46)
            self.assertEqual(flags['C'], 0)

    def test_zero_addition_is_noop(self):
        for v in VARIANTS:
            for x in range(0, 0x9A):
                if not is_bcd(x):
                    continue
                (raw, flags) = alu.add(v, x, 0x00)
                self.assertEqual(alu.daa(v, raw, flags)[0], x)
                self.assertEqual(alu.daa(v, raw, flags)[1]['C'], 0)

    def test_bcd_addition(self):
        def bcd(n):
            return ((n//10) << 4) | (n%10)
        for v in VARIANTS:
            for x in range(0, 100):
                for y in range(0, 100):
                    (raw, flags) = alu.add(v, bcd(x), bcd(y))
                    (result, flags) = alu.daa(v, raw, flags)
                    self.assertEqual(result, bcd((x + y)%100), msg="{} + {}".format(x, y))
                    self.assertEqual(flags['C'], 1 if x + y > 99 else 0, msg="{} + {}".format(x, y))

    def test_bcd_subtraction_z80(self):
        def bcd(n):
            return ((n//10) << 4) | (n%10)
        for x in range(0, 100):
            for y in range(0, 100):
                (raw, flags) = alu.sub(Z80, bcd(x), bcd(y))
                (result, flags) = alu.daa(Z80, raw, flags)
                self.assertEqual(result, bcd((x - y)%100), msg="{} - {}".format(x, y))
                self.assertEqual(flags['C'], 1 if x < y else 0)

    def test_not_bcd_is_adjusted_anyway(self):
        for v in VARIANTS:
            (result, flags) = alu.daa(v, 0x9A, { 'H' : 0, 'C' : 0 })
            self.assertEqual(result, 0x00)
            self.assertEqual(flags['C'], 1)
            self.assertEqual(flags['Z'], 1)

    def test_incoming_carry_kept(self):
        for v in VARIANTS:
            (result, flags) = alu.daa(v, 0x12, { 'H' : 0, 'C' : 1 })
            self.assertEqual(result, 0x72)
            self.assertEqual(flags['C'], 1)

class TestRotates(unittest.TestCase):
    def test_rlca_rrca(self):
        for v in VARIANTS:
            self.assertEqual(alu.rlca(v, 0x81)[0], 0x03)
            self.assertEqual(alu.rlca(v, 0x81)[1]['C'], 1)
            self.assertEqual(alu.rrca(v, 0x81)[0], 0xC0)
            self.assertEqual(alu.rrca(v, 0x81)[1]['C'], 1)
            self.assertEqual(alu.rrca(v, 0x02)[1]['C'], 0)

    def test_rla_rra_through_carry(self):
        for v in VARIANTS:
            self.assertEqual(alu.rla(v, 0x80, 0), (0x00, alu.rla(v, 0x80, 0)[1]))
            self.assertEqual(alu.rla(v, 0x80, 0)[1]['C'], 1)
            self.assertEqual(alu.rla(v, 0x00, 1)[0], 0x01)
            self.assertEqual(alu.rra(v, 0x01, 0)[0], 0x00)
            self.assertEqual(alu.rra(v, 0x01, 0)[1]['C'], 1)
            self.assertEqual(alu.rra(v, 0x00, 1)[0], 0x80)

    def test_rotate_flags(self):
        self.assertEqual(alu.rlca(Z80, 0x01)[1], { 'C' : 0, 'H' : 0, 'N' : 0 })
        self.assertEqual(alu.rlca(I8085, 0x01)[1], { 'C' : 0 })

    def test_scf_ccf(self):
        self.assertEqual(alu.scf(I8085), { 'C' : 1 })
        self.assertEqual(alu.ccf(I8085, 1), { 'C' : 0 })
        self.assertEqual(alu.ccf(Z80, 1), { 'C' : 0, 'H' : 1, 'N' : 0 })
        self.assertEqual(alu.scf(Z80), { 'C' : 1, 'H' : 0, 'N' : 0 })
