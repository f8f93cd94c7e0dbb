# vspec/system_model.py
"""
System Model: the fixed set of machine-level entities a specification can
name with a ``$`` prefix.

    pc                          bv<xlen>    program counter
    returned                    bv1         set once the function has returned
    current_priv                bv2         privilege mode
    mem_b / mem_h / mem_w / mem_d           memory as arrays from bv<xlen>
                                            addresses to bv8 / bv16 / bv32 / bv64
    zero ra sp gp tp t0-t6 s0-s11 a0-a7      integer registers, bv<xlen>
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Optional, Tuple

from vspec.nominal import Array, NominalType, Scalar

PC_VAR = "pc"
RETURNED_FLAG = "returned"
PRIV_VAR = "current_priv"
MEM_VAR_B = "mem_b"
MEM_VAR_H = "mem_h"
MEM_VAR_W = "mem_w"
MEM_VAR_D = "mem_d"

REGISTERS: Tuple[str, ...] = (
    "zero", "ra", "sp", "gp", "tp",
    "t0", "t1", "t2",
    "s0", "s1",
    "a0", "a1", "a2", "a3", "a4", "a5", "a6", "a7",
    "s2", "s3", "s4", "s5", "s6", "s7", "s8", "s9", "s10", "s11",
    "t3", "t4", "t5", "t6",
)

_MEMORY_WIDTHS: Dict[str, int] = {
    MEM_VAR_B: 8,
    MEM_VAR_H: 16,
    MEM_VAR_W: 32,
    MEM_VAR_D: 64,
}

_FIXED_WIDTHS: Dict[str, int] = {
    RETURNED_FLAG: 1,
    PRIV_VAR: 2,
}


class SystemModel:
    """Closed name-to-type table parameterised by the word width."""

    def names(self) -> FrozenSet[str]:
        return frozenset(
            (PC_VAR,) + tuple(_FIXED_WIDTHS) + tuple(_MEMORY_WIDTHS) + REGISTERS
        )

    def entity_type(self, name: str, xlen: int) -> Optional[NominalType]:
        """Nominal type of system entity *name* (without ``$``), or ``None``."""
        if name == PC_VAR or name in REGISTERS:
            return Scalar(xlen)
        if name in _FIXED_WIDTHS:
            return Scalar(_FIXED_WIDTHS[name])
        if name in _MEMORY_WIDTHS:
            return Array(element=Scalar(_MEMORY_WIDTHS[name]), index=Scalar(xlen))
        return None

    def __contains__(self, name: str) -> bool:
        return name in self.names()


DEFAULT_SYSTEM_MODEL = SystemModel()
