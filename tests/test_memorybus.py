import unittest
from pyz8085.memorybus import *

class TestMemoryBus(unittest.TestCase):
    def setUp(self):
        self.UUT = MemoryBus()

    def test_init(self):
        self.assertEqual(self.UUT.size, 0x10000)
        self.assertEqual(self.UUT.dump(0x0000, 0x10), bytes(0x10))
        self.assertEqual(len(self.UUT.data), 0x10000)

    def test_address_space_is_fixed(self):
        with self.assertRaises(TypeError):
            MemoryBus(0x100)

    def test_read_write(self):
        for n in range(0,0x10000):
            self.UUT.write(n, 0xFF - (n%0x100))

        for n in range(0,0x10000):
            self.assertEqual(0xFF - (n%0x100), self.UUT.read(n))

    def test_read8_write8(self):
        self.UUT.write8(0x2050, 0x3A)
        self.assertEqual(self.UUT.read8(0x2050), 0x3A)
        self.assertEqual(self.UUT.read(0x2050), 0x3A)

    def test_address_wraps(self):
        self.UUT.write(0x10000, 0x11)
        self.assertEqual(self.UUT.read(0x0000), 0x11)
        self.UUT.write(-1, 0x22)
        self.assertEqual(self.UUT.read(0xFFFF), 0x22)

    def test_value_masked(self):
        self.UUT.write(0x1000, 0x1AB)
        self.assertEqual(self.UUT.read(0x1000), 0xAB)

    def test_read16_little_endian(self):
        self.UUT.write(0x2050, 0x34)
        self.UUT.write(0x2051, 0x12)
        self.assertEqual(self.UUT.read16(0x2050), 0x1234)

    def test_write16_little_endian(self):
        self.UUT.write16(0x3020, 0x68AC)
        self.assertEqual(self.UUT.read(0x3020), 0xAC)
        self.assertEqual(self.UUT.read(0x3021), 0x68)

    def test_16bit_wraps_at_top_of_memory(self):
        self.UUT.write16(0xFFFF, 0xCAFE)
        self.assertEqual(self.UUT.read(0xFFFF), 0xFE)
        self.assertEqual(self.UUT.read(0x0000), 0xCA)
        self.assertEqual(self.UUT.read16(0xFFFF), 0xCAFE)

    def test_load(self):
        self.UUT.load({ 0x8000 : [ 0x3E, 0x67 ],
                        0x0030 : bytes([ 0x11, 0x15, 0x00 ]) })
        self.assertEqual(self.UUT.dump(0x8000, 2), bytes([ 0x3E, 0x67 ]))
        self.assertEqual(self.UUT.dump(0x0030, 3), bytes([ 0x11, 0x15, 0x00 ]))
        self.assertEqual(self.UUT.read(0x8002), 0x00)

    def test_load_wraps(self):
        self.UUT.load({ 0xFFFE : [ 0x01, 0x02, 0x03 ] })
        self.assertEqual(self.UUT.dump(0xFFFE, 3), bytes([ 0x01, 0x02, 0x03 ]))
        self.assertEqual(self.UUT.read(0x0000), 0x03)
