"""Opcode tables and the instruction decoder.

Each table is a plain dictionary mapping an opcode (an integer, or a tuple of
integers for opcodes which follow a prefix byte) to an OpcodeEntry naming the
operation and the operand descriptors (see addressing.py) in the order their
encoded fields appear in the instruction stream.

The Z80 and the 8085 share the single byte opcodes of the 8080, so both tables
are built from the same common block, with the Z80 then adding its relative
jumps, exchanges and prefixed instructions."""

from .addressing import Immediate, Register, Indirect, Indexed, Direct, Relative, Port, Condition

__all__ = [ "DecodeError", "ILLEGAL_OPCODE", "ILLEGAL_OPERANDS",
            "OpcodeEntry", "Instruction", "Z80_INSTRUCTIONS", "I8085_INSTRUCTIONS", "INSTRUCTION_TABLES",
            "instruction_prefixes", "decode_instruction",
            "NOP", "HALT", "LD", "INC", "DEC", "INC16", "DEC16", "ADD16",
            "ADD", "ADC", "SUB", "SBC", "AND", "XOR", "OR", "CP",
            "DAA", "CPL", "NEG", "SCF", "CCF", "RLCA", "RRCA", "RLA", "RRA",
            "JP", "JR", "DJNZ", "CALL", "RET", "RST", "PUSH", "POP",
            "EX", "EXAF", "EXX", "IN", "OUT", "LDI", "LDD", "LDIR", "LDDR" ]

ILLEGAL_OPCODE   = "illegal opcode"
ILLEGAL_OPERANDS = "illegal operand encoding"

class DecodeError(Exception):
    def __init__(self, inst, reason=ILLEGAL_OPCODE, address=None):
        self.inst    = inst
        self.reason  = reason
        self.address = address
        if isinstance(inst, tuple):
            inst = "(" + ', '.join('0x{:02X}'.format(i) for i in inst) + ")"
        else:
            inst = "0x{:02X}".format(inst)
        super(DecodeError, self).__init__("Cannot decode instruction {}: {}".format(inst, reason))

# Operation kinds

NOP   = "NOP"
HALT  = "HALT"
LD    = "LD"
INC   = "INC"
DEC   = "DEC"
INC16 = "INC16"
DEC16 = "DEC16"
ADD16 = "ADD16"
ADD   = "ADD"
ADC   = "ADC"
SUB   = "SUB"
SBC   = "SBC"
AND   = "AND"
XOR   = "XOR"
OR    = "OR"
CP    = "CP"
DAA   = "DAA"
CPL   = "CPL"
NEG   = "NEG"
SCF   = "SCF"
CCF   = "CCF"
RLCA  = "RLCA"
RRCA  = "RRCA"
RLA   = "RLA"
RRA   = "RRA"
JP    = "JP"
JR    = "JR"
DJNZ  = "DJNZ"
CALL  = "CALL"
RET   = "RET"
RST   = "RST"
PUSH  = "PUSH"
POP   = "POP"
EX    = "EX"
EXAF  = "EXAF"
EXX   = "EXX"
IN    = "IN"
OUT   = "OUT"
LDI   = "LDI"
LDD   = "LDD"
LDIR  = "LDIR"
LDDR  = "LDDR"

class OpcodeEntry(object):
    """One row of an opcode table."""
    def __init__(self, op, operands=(), mnemonic=None):
        self.op       = op
        self.operands = tuple(operands)
        self.mnemonic = mnemonic if mnemonic is not None else op
        self.length   = None

    def operand_size(self):
        return sum(operand.size for operand in self.operands)

    def __repr__(self):
        return "OpcodeEntry({!r}, {!r}, length={!r})".format(self.mnemonic, self.operands, self.length)

class Instruction(object):
    """A decoded instruction, with its operand descriptors bound to the values from the instruction stream."""
    def __init__(self, opcode, op, operands, length, variant, mnemonic):
        self.opcode   = opcode
        self.op       = op
        self.operands = tuple(operands)
        self.length   = length
        self.variant  = variant
        self.mnemonic = mnemonic

    def __repr__(self):
        return "Instruction({!r}, {!r}, length={})".format(self.mnemonic, self.operands, self.length)

A  = Register("A")
N  = Immediate(1)
NN = Immediate(2)

R8_Z80   = ("B", "C", "D", "E", "H", "L", "(HL)", "A")
R8_8085  = ("B", "C", "D", "E", "H", "L", "M", "A")
R16_Z80  = ("BC", "DE", "HL", "SP")
R16_8085 = ("B", "D", "H", "SP")

ALU_OPS           = (ADD, ADC, SUB, SBC, AND, XOR, OR, CP)
ALU_NAMES_Z80     = ("ADD A,", "ADC A,", "SUB ", "SBC A,", "AND ", "XOR ", "OR ", "CP ")
ALU_NAMES_8085    = ("ADD ", "ADC ", "SUB ", "SBB ", "ANA ", "XRA ", "ORA ", "CMP ")
ALU_IMM_NAMES_8085 = ("ADI ", "ACI ", "SUI ", "SBI ", "ANI ", "XRI ", "ORI ", "CPI ")

CONDITIONS      = (Condition('Z', 0), Condition('Z', 1), Condition('C', 0), Condition('C', 1),
                   Condition('P', 0), Condition('P', 1), Condition('S', 0), Condition('S', 1))
CONDITION_NAMES = ("NZ", "Z", "NC", "C", "PO", "PE", "P", "M")

def r8(n):
    """The operand for the register encoded as n in the 3-bit register fields."""
    if n == 6:
        return Indirect("HL")
    return Register(R8_Z80[n])

def _common_instructions(z80):
    """The opcodes shared by both processors, with mnemonics in the style of the one asked for."""
    table = {}
    def add(key, op, operands, z80_name, i8085_name):
        table[key] = OpcodeEntry(op, operands, z80_name if z80 else i8085_name)

    add(0x00, NOP,  (), "NOP",  "NOP")
    add(0x76, HALT, (), "HALT", "HLT")

    for p in range(0, 4):
        (zp, ip) = (R16_Z80[p], R16_8085[p])
        pair = Register(zp)
        add(0x01 | (p << 4), LD,    (pair, NN),              "LD {},nn".format(zp),   "LXI {},nn".format(ip))
        add(0x03 | (p << 4), INC16, (pair,),                 "INC {}".format(zp),     "INX {}".format(ip))
        add(0x09 | (p << 4), ADD16, (Register("HL"), pair),  "ADD HL,{}".format(zp),  "DAD {}".format(ip))
        add(0x0B | (p << 4), DEC16, (pair,),                 "DEC {}".format(zp),     "DCX {}".format(ip))

    add(0x02, LD, (Indirect("BC"), A),               "LD (BC),A",  "STAX B")
    add(0x12, LD, (Indirect("DE"), A),               "LD (DE),A",  "STAX D")
    add(0x0A, LD, (A, Indirect("BC")),               "LD A,(BC)",  "LDAX B")
    add(0x1A, LD, (A, Indirect("DE")),               "LD A,(DE)",  "LDAX D")
    add(0x22, LD, (Direct(2), Register("HL")),       "LD (nn),HL", "SHLD nn")
    add(0x2A, LD, (Register("HL"), Direct(2)),       "LD HL,(nn)", "LHLD nn")
    add(0x32, LD, (Direct(1), A),                    "LD (nn),A",  "STA nn")
    add(0x3A, LD, (A, Direct(1)),                    "LD A,(nn)",  "LDA nn")

    for r in range(0, 8):
        (zr, ir) = (R8_Z80[r], R8_8085[r])
        add(0x04 | (r << 3), INC, (r8(r),),    "INC {}".format(zr),     "INR {}".format(ir))
        add(0x05 | (r << 3), DEC, (r8(r),),    "DEC {}".format(zr),     "DCR {}".format(ir))
        add(0x06 | (r << 3), LD,  (r8(r), N),  "LD {},n".format(zr),    "MVI {},n".format(ir))

    add(0x07, RLCA, (), "RLCA", "RLC")
    add(0x0F, RRCA, (), "RRCA", "RRC")
    add(0x17, RLA,  (), "RLA",  "RAL")
    add(0x1F, RRA,  (), "RRA",  "RAR")
    add(0x27, DAA,  (), "DAA",  "DAA")
    add(0x2F, CPL,  (), "CPL",  "CMA")
    add(0x37, SCF,  (), "SCF",  "STC")
    add(0x3F, CCF,  (), "CCF",  "CMC")

    for d in range(0, 8):
        for s in range(0, 8):
            if d == 6 and s == 6:
                continue # This encoding is HALT
            add(0x40 | (d << 3) | s, LD, (r8(d), r8(s)),
                "LD {},{}".format(R8_Z80[d], R8_Z80[s]), "MOV {},{}".format(R8_8085[d], R8_8085[s]))

    for a in range(0, 8):
        for s in range(0, 8):
            add(0x80 | (a << 3) | s, ALU_OPS[a], (A, r8(s)), ALU_NAMES_Z80[a] + R8_Z80[s], ALU_NAMES_8085[a] + R8_8085[s])
        add(0xC6 | (a << 3), ALU_OPS[a], (A, N), ALU_NAMES_Z80[a] + "n", ALU_IMM_NAMES_8085[a] + "n")

    for cc in range(0, 8):
        (cond, name) = (CONDITIONS[cc], CONDITION_NAMES[cc])
        add(0xC0 | (cc << 3), RET,  (cond,),     "RET {}".format(name),     "R{}".format(name))
        add(0xC2 | (cc << 3), JP,   (cond, NN),  "JP {},nn".format(name),   "J{} nn".format(name))
        add(0xC4 | (cc << 3), CALL, (cond, NN),  "CALL {},nn".format(name), "C{} nn".format(name))
        add(0xC7 | (cc << 3), RST,  (),          "RST {:02X}H".format(cc << 3), "RST {}".format(cc))

    for p in range(0, 4):
        (zp, ip) = (("BC", "DE", "HL", "AF")[p], ("B", "D", "H", "PSW")[p])
        add(0xC1 | (p << 4), POP,  (Register(zp),), "POP {}".format(zp),  "POP {}".format(ip))
        add(0xC5 | (p << 4), PUSH, (Register(zp),), "PUSH {}".format(zp), "PUSH {}".format(ip))

    add(0xC3, JP,   (NN,),                                  "JP nn",      "JMP nn")
    add(0xC9, RET,  (),                                     "RET",        "RET")
    add(0xCD, CALL, (NN,),                                  "CALL nn",    "CALL nn")
    add(0xD3, OUT,  (Port(), A),                            "OUT (n),A",  "OUT n")
    add(0xDB, IN,   (A, Port()),                            "IN A,(n)",   "IN n")
    add(0xE3, EX,   (Indirect("SP", 2), Register("HL")),    "EX (SP),HL", "XTHL")
    add(0xE9, JP,   (Register("HL"),),                      "JP (HL)",    "PCHL")
    add(0xEB, EX,   (Register("DE"), Register("HL")),       "EX DE,HL",   "XCHG")
    add(0xF9, LD,   (Register("SP"), Register("HL")),       "LD SP,HL",   "SPHL")
    return table

def _index_instructions(prefix, index):
    """The DD (IX) and FD (IY) prefixed instructions."""
    X = Register(index)
    table = {
        (prefix, 0x21) : OpcodeEntry(LD,    (X, NN),                      "LD {},nn".format(index)),
        (prefix, 0x22) : OpcodeEntry(LD,    (Direct(2), X),               "LD (nn),{}".format(index)),
        (prefix, 0x2A) : OpcodeEntry(LD,    (X, Direct(2)),               "LD {},(nn)".format(index)),
        (prefix, 0x23) : OpcodeEntry(INC16, (X,),                         "INC {}".format(index)),
        (prefix, 0x2B) : OpcodeEntry(DEC16, (X,),                         "DEC {}".format(index)),
        (prefix, 0x34) : OpcodeEntry(INC,   (Indexed(index),),            "INC ({}+d)".format(index)),
        (prefix, 0x35) : OpcodeEntry(DEC,   (Indexed(index),),            "DEC ({}+d)".format(index)),
        (prefix, 0x36) : OpcodeEntry(LD,    (Indexed(index), N),          "LD ({}+d),n".format(index)),
        (prefix, 0xE1) : OpcodeEntry(POP,   (X,),                         "POP {}".format(index)),
        (prefix, 0xE3) : OpcodeEntry(EX,    (Indirect("SP", 2), X),       "EX (SP),{}".format(index)),
        (prefix, 0xE5) : OpcodeEntry(PUSH,  (X,),                         "PUSH {}".format(index)),
        (prefix, 0xE9) : OpcodeEntry(JP,    (X,),                         "JP ({})".format(index)),
        (prefix, 0xF9) : OpcodeEntry(LD,    (Register("SP"), X),          "LD SP,{}".format(index)),
        }
    for (p, pair) in enumerate(("BC", "DE", index, "SP")):
        table[(prefix, 0x09 | (p << 4))] = OpcodeEntry(ADD16, (X, Register(pair)), "ADD {},{}".format(index, pair))
    for r in range(0, 8):
        if r == 6:
            continue
        table[(prefix, 0x46 | (r << 3))] = OpcodeEntry(LD, (r8(r), Indexed(index)), "LD {},({}+d)".format(R8_Z80[r], index))
        table[(prefix, 0x70 | r)]        = OpcodeEntry(LD, (Indexed(index), r8(r)), "LD ({}+d),{}".format(index, R8_Z80[r]))
    for a in range(0, 8):
        table[(prefix, 0x86 | (a << 3))] = OpcodeEntry(ALU_OPS[a], (A, Indexed(index)), "{}({}+d)".format(ALU_NAMES_Z80[a], index))
    return table

def _finalise(table):
    """Fill in the total length of each entry, which is known once its key is."""
    for (key, entry) in table.items():
        entry.length = (len(key) if isinstance(key, tuple) else 1) + entry.operand_size()
    return table

def _z80_instructions():
    table = _common_instructions(z80=True)
    table.update({
        0x08 : OpcodeEntry(EXAF, (),                                 "EX AF,AF'"),
        0x10 : OpcodeEntry(DJNZ, (Relative(),),                      "DJNZ e"),
        0x18 : OpcodeEntry(JR,   (Relative(),),                      "JR e"),
        0x20 : OpcodeEntry(JR,   (Condition('Z', 0), Relative()),    "JR NZ,e"),
        0x28 : OpcodeEntry(JR,   (Condition('Z', 1), Relative()),    "JR Z,e"),
        0x30 : OpcodeEntry(JR,   (Condition('C', 0), Relative()),    "JR NC,e"),
        0x38 : OpcodeEntry(JR,   (Condition('C', 1), Relative()),    "JR C,e"),
        0xD9 : OpcodeEntry(EXX,  (),                                 "EXX"),

        (0xED, 0x43) : OpcodeEntry(LD,   (Direct(2), Register("BC")), "LD (nn),BC"),
        (0xED, 0x4B) : OpcodeEntry(LD,   (Register("BC"), Direct(2)), "LD BC,(nn)"),
        (0xED, 0x53) : OpcodeEntry(LD,   (Direct(2), Register("DE")), "LD (nn),DE"),
        (0xED, 0x5B) : OpcodeEntry(LD,   (Register("DE"), Direct(2)), "LD DE,(nn)"),
        (0xED, 0x73) : OpcodeEntry(LD,   (Direct(2), Register("SP")), "LD (nn),SP"),
        (0xED, 0x7B) : OpcodeEntry(LD,   (Register("SP"), Direct(2)), "LD SP,(nn)"),
        (0xED, 0x44) : OpcodeEntry(NEG,  (),                          "NEG"),
        (0xED, 0xA0) : OpcodeEntry(LDI,  (),                          "LDI"),
        (0xED, 0xA8) : OpcodeEntry(LDD,  (),                          "LDD"),
        (0xED, 0xB0) : OpcodeEntry(LDIR, (),                          "LDIR"),
        (0xED, 0xB8) : OpcodeEntry(LDDR, (),                          "LDDR"),
        })
    table.update(_index_instructions(0xDD, "IX"))
    table.update(_index_instructions(0xFD, "IY"))
    return _finalise(table)

def _i8085_instructions():
    return _finalise(_common_instructions(z80=False))

Z80_INSTRUCTIONS   = _z80_instructions()
I8085_INSTRUCTIONS = _i8085_instructions()

INSTRUCTION_TABLES = { "z80" : Z80_INSTRUCTIONS, "8085" : I8085_INSTRUCTIONS }

def instruction_prefixes(table):
    """Return the set of byte sequences which are proper prefixes of opcodes in the table (single bytes as
    integers, longer sequences as tuples)."""
    prefixes = set()
    for key in table:
        if isinstance(key, tuple):
            for n in range(1, len(key)):
                prefixes.add(key[0] if n == 1 else key[:n])
    return prefixes

def decode_instruction(table, read, address, variant=None, prefixes=None):
    """Decode the instruction at 'address', using 'read' (a callable taking an address and returning a byte)
    to fetch the opcode and its operand bytes. Nothing is written, so a failure leaves no trace.

    Raises DecodeError if the bytes are not an opcode in the table, or name an encoding which moves memory to
    memory."""
    if prefixes is None:
        prefixes = instruction_prefixes(table)

    key    = read(address)
    length = 1
    while key in prefixes:
        byte   = read((address + length)&0xFFFF)
        key    = (key, byte) if isinstance(key, int) else key + (byte,)
        length += 1

    if key not in table:
        raise DecodeError(key, ILLEGAL_OPCODE, address)
    entry = table[key]

    if entry.op == LD and len(entry.operands) == 2 and all(operand.is_memory() for operand in entry.operands):
        raise DecodeError(key, ILLEGAL_OPERANDS, address)

    operands = []
    for operand in entry.operands:
        if operand.size > 0:
            field = 0
            for n in range(0, operand.size):
                field |= read((address + length)&0xFFFF) << (8*n)
                length += 1
            operand = operand.bind(field)
        operands.append(operand)

    return Instruction(key, entry.op, operands, length, variant, entry.mnemonic)
