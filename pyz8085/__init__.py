"""Instruction set simulator for the Z80 and 8085 processors."""

from .variants import Z80, I8085, get_variant
from .memorybus import MemoryBus
from .iobus import IOBus, Device, CallbackDevice
from .registers import RegisterFile
from .instructions import DecodeError
from .cpu import CPU, CPUState, RunOutcome, RunResult
