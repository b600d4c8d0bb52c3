import logging
from collections import namedtuple
from enum import Enum

from .registers import RegisterFile
from .memorybus import MemoryBus
from .iobus import IOBus
from .variants import Z80, get_variant
from .addressing import Condition, resolve
from .instructions import *
from . import alu

__all__ = [ "CPU", "CPUState", "RunOutcome", "RunResult", "DecodeError" ]

logger = logging.getLogger(__name__)

class CPUState(Enum):
    FETCH   = "fetch"
    DECODE  = "decode"
    EXECUTE = "execute"
    HALTED  = "halted"

class RunOutcome(Enum):
    HALTED           = "halted"
    BUDGET_EXHAUSTED = "budget exhausted"

RunResult = namedtuple("RunResult", [ "outcome", "steps" ])

DEFAULT_MAX_STEPS = 1000000

ARITHMETIC = {
    ADD : lambda v, a, b, c : alu.add(v, a, b),
    ADC : lambda v, a, b, c : alu.add(v, a, b, c),
    SUB : lambda v, a, b, c : alu.sub(v, a, b),
    SBC : lambda v, a, b, c : alu.sub(v, a, b, c),
    AND : lambda v, a, b, c : alu.and_(v, a, b),
    XOR : lambda v, a, b, c : alu.xor(v, a, b),
    OR  : lambda v, a, b, c : alu.or_(v, a, b),
    CP  : lambda v, a, b, c : alu.compare(v, a, b),
    }

ROTATES = {
    RLCA : lambda v, a, c : alu.rlca(v, a),
    RRCA : lambda v, a, c : alu.rrca(v, a),
    RLA  : lambda v, a, c : alu.rla(v, a, c),
    RRA  : lambda v, a, c : alu.rra(v, a, c),
    }

class CPU(object):
    """An instruction level simulator of either processor. Each call to step() fetches, decodes and executes
    exactly one instruction."""

    def __init__(self, iobus=None, membus=None, variant=Z80):
        self.variant = get_variant(variant)
        self.iobus   = iobus if iobus is not None else IOBus()
        self.membus  = membus if membus is not None else MemoryBus()
        self.reg     = RegisterFile(self.variant)

        self.instructions = INSTRUCTION_TABLES[self.variant.name]
        self.prefixes     = instruction_prefixes(self.instructions)

        self.state = CPUState.FETCH
        self.most_recent_instruction = None

        self.handlers = {
            NOP   : self._nop,
            HALT  : self._halt,
            LD    : self._ld,
            INC   : self._incdec,
            DEC   : self._incdec,
            INC16 : self._incdec16,
            DEC16 : self._incdec16,
            ADD16 : self._add16,
            DAA   : self._daa,
            CPL   : self._cpl,
            NEG   : self._neg,
            SCF   : self._scf,
            CCF   : self._ccf,
            JP    : self._jp,
            JR    : self._jr,
            DJNZ  : self._djnz,
            CALL  : self._call,
            RET   : self._ret,
            RST   : self._rst,
            PUSH  : self._push,
            POP   : self._pop,
            EX    : self._ex,
            EXAF  : self._exaf,
            EXX   : self._exx,
            IN    : self._in,
            OUT   : self._out,
            LDI   : self._block_transfer,
            LDD   : self._block_transfer,
            LDIR  : self._block_transfer,
            LDDR  : self._block_transfer,
            }
        self.handlers.update((op, self._arithmetic) for op in ARITHMETIC)
        self.handlers.update((op, self._rotate) for op in ROTATES)

    def reset(self):
        """Clear the registers and leave the halted state, memory is untouched."""
        self.reg   = RegisterFile(self.variant)
        self.state = CPUState.FETCH
        self.most_recent_instruction = None

    def load(self, origins, entry=None):
        """Load a program given as a mapping of origins to byte sequences and point PC at 'entry', or at the
        lowest origin if no entry point is given."""
        self.membus.load(origins)
        if entry is not None:
            self.reg.PC = entry
        elif len(origins) > 0:
            self.reg.PC = min(origins)

    def halted(self):
        return self.state == CPUState.HALTED

    def step(self):
        """Execute a single instruction and return True if the cpu is now halted. Raises DecodeError, leaving PC
        on the offending instruction, if the bytes at PC are not a valid instruction."""
        if self.state == CPUState.HALTED:
            return True

        self.state = CPUState.FETCH
        PC = self.reg.PC

        self.state = CPUState.DECODE
        try:
            inst = decode_instruction(self.instructions, self.membus.read, PC, variant=self.variant, prefixes=self.prefixes)
        except DecodeError as e:
            logger.warning("%s at 0x%04X", e, PC)
            self.state = CPUState.FETCH
            raise

        self.state = CPUState.EXECUTE
        self.most_recent_instruction = inst
        self.reg.PC = PC + inst.length
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("0x%04X: %s %r", PC, inst.mnemonic, inst.operands)
        self.handlers[inst.op](inst)

        if self.state == CPUState.HALTED:
            logger.info("Halted at 0x%04X", PC)
            return True
        self.state = CPUState.FETCH
        return False

    def run(self, max_steps=DEFAULT_MAX_STEPS):
        """Step until the cpu halts or max_steps instructions have been executed."""
        steps = 0
        while self.state != CPUState.HALTED:
            if steps >= max_steps:
                logger.info("Step budget of %d exhausted at 0x%04X", max_steps, self.reg.PC)
                return RunResult(RunOutcome.BUDGET_EXHAUSTED, steps)
            self.step()
            steps += 1
        return RunResult(RunOutcome.HALTED, steps)

    # Stack

    def push(self, value):
        """Push a 16-bit value, high byte first."""
        self.reg.SP = self.reg.SP - 1
        self.membus.write(self.reg.SP, (value >> 8)&0xFF)
        self.reg.SP = self.reg.SP - 1
        self.membus.write(self.reg.SP, value&0xFF)

    def pop(self):
        """Pop a 16-bit value, low byte first."""
        low = self.membus.read(self.reg.SP)
        self.reg.SP = self.reg.SP + 1
        high = self.membus.read(self.reg.SP)
        self.reg.SP = self.reg.SP + 1
        return (high << 8) | low

    # Ports

    def port_in(self, port):
        return self.iobus.read(port&0xFF)&0xFF

    def port_out(self, port, data):
        self.iobus.write(port&0xFF, data&0xFF)

    # Instruction handlers

    def _locations(self, inst):
        return [ resolve(self, operand) for operand in inst.operands if not isinstance(operand, Condition) ]

    def _condition_met(self, inst):
        for operand in inst.operands:
            if isinstance(operand, Condition):
                return operand.test(self.reg)
        return True

    def _nop(self, inst):
        pass

    def _halt(self, inst):
        self.state = CPUState.HALTED

    def _ld(self, inst):
        (dest, source) = self._locations(inst)
        dest.write(source.read())

    def _arithmetic(self, inst):
        (dest, source) = self._locations(inst)
        (result, flags) = ARITHMETIC[inst.op](self.variant, dest.read(), source.read(), self.reg.getflag('C'))
        if inst.op != CP:
            dest.write(result)
        self.reg.setflags(flags)

    def _incdec(self, inst):
        (location,) = self._locations(inst)
        operation = alu.inc if inst.op == INC else alu.dec
        (result, flags) = operation(self.variant, location.read())
        location.write(result)
        self.reg.setflags(flags)

    def _incdec16(self, inst):
        if inst.op == INC16:
            self.reg.increment(inst.operands[0].name)
        else:
            self.reg.decrement(inst.operands[0].name)

    def _add16(self, inst):
        (dest, source) = self._locations(inst)
        (result, flags) = alu.add16(self.variant, dest.read(), source.read())
        dest.write(result)
        self.reg.setflags(flags)

    def _daa(self, inst):
        (self.reg.A, flags) = alu.daa(self.variant, self.reg.A, self.reg.flags())
        self.reg.setflags(flags)

    def _cpl(self, inst):
        (self.reg.A, flags) = alu.cpl(self.variant, self.reg.A)
        self.reg.setflags(flags)

    def _neg(self, inst):
        (self.reg.A, flags) = alu.neg(self.variant, self.reg.A)
        self.reg.setflags(flags)

    def _scf(self, inst):
        self.reg.setflags(alu.scf(self.variant))

    def _ccf(self, inst):
        self.reg.setflags(alu.ccf(self.variant, self.reg.getflag('C')))

    def _rotate(self, inst):
        (self.reg.A, flags) = ROTATES[inst.op](self.variant, self.reg.A, self.reg.getflag('C'))
        self.reg.setflags(flags)

    def _jp(self, inst):
        (target,) = self._locations(inst)
        if self._condition_met(inst):
            self.reg.PC = target.read()

    def _jr(self, inst):
        (offset,) = self._locations(inst)
        if self._condition_met(inst):
            self.reg.PC = self.reg.PC + offset.read()

    def _djnz(self, inst):
        (offset,) = self._locations(inst)
        self.reg.B = self.reg.B - 1
        if self.reg.B != 0:
            self.reg.PC = self.reg.PC + offset.read()

    def _call(self, inst):
        (target,) = self._locations(inst)
        if self._condition_met(inst):
            self.push(self.reg.PC)
            self.reg.PC = target.read()

    def _ret(self, inst):
        if self._condition_met(inst):
            self.reg.PC = self.pop()

    def _rst(self, inst):
        self.push(self.reg.PC)
        self.reg.PC = inst.opcode&0x38

    def _push(self, inst):
        (source,) = self._locations(inst)
        self.push(source.read())

    def _pop(self, inst):
        (dest,) = self._locations(inst)
        dest.write(self.pop())

    def _ex(self, inst):
        (a, b) = self._locations(inst)
        (va, vb) = (a.read(), b.read())
        a.write(vb)
        b.write(va)

    def _exaf(self, inst):
        self.reg.ex()

    def _exx(self, inst):
        self.reg.exx()

    def _in(self, inst):
        (dest, port) = self._locations(inst)
        dest.write(self.port_in(port.read()))

    def _out(self, inst):
        (port, source) = self._locations(inst)
        self.port_out(port.read(), source.read())

    def _block_transfer(self, inst):
        """LDI, LDD, LDIR and LDDR. The repeating forms run to completion within a single step, and do nothing at
        all if BC is already zero."""
        delta  = 1 if inst.op in (LDI, LDIR) else -1
        repeat = inst.op in (LDIR, LDDR)
        if repeat and self.reg.BC == 0:
            return

        while True:
            self.membus.write(self.reg.DE, self.membus.read(self.reg.HL))
            self.reg.HL = self.reg.HL + delta
            self.reg.DE = self.reg.DE + delta
            self.reg.BC = self.reg.BC - 1
            if not repeat or self.reg.BC == 0:
                break

        self.reg.setflags({ 'H' : 0, 'N' : 0, 'P' : 1 if self.reg.BC != 0 else 0 })
