# tests/test_system_model.py
"""
Tests for the system model and the parser configuration.
"""

import logging

import pytest

from vspec.config import ParserConfig
from vspec.errors import ConfigError, VspecErrorCodes
from vspec.nominal import Array, Scalar
from vspec.parser import SpecParser
from vspec.system_model import (
    DEFAULT_SYSTEM_MODEL,
    MEM_VAR_B,
    MEM_VAR_D,
    MEM_VAR_H,
    MEM_VAR_W,
    PC_VAR,
    PRIV_VAR,
    REGISTERS,
    RETURNED_FLAG,
    SystemModel,
)


class TestSystemModel:

    @pytest.mark.parametrize("xlen", [32, 64])
    def test_pc_and_registers_follow_xlen(self, xlen):
        assert DEFAULT_SYSTEM_MODEL.entity_type(PC_VAR, xlen) == Scalar(xlen)
        for reg in REGISTERS:
            assert DEFAULT_SYSTEM_MODEL.entity_type(reg, xlen) == Scalar(xlen)

    def test_fixed_widths(self):
        assert DEFAULT_SYSTEM_MODEL.entity_type(RETURNED_FLAG, 64) == Scalar(1)
        assert DEFAULT_SYSTEM_MODEL.entity_type(PRIV_VAR, 32) == Scalar(2)

    @pytest.mark.parametrize("name, width", [
        (MEM_VAR_B, 8),
        (MEM_VAR_H, 16),
        (MEM_VAR_W, 32),
        (MEM_VAR_D, 64),
    ])
    def test_memories(self, name, width):
        assert DEFAULT_SYSTEM_MODEL.entity_type(name, 32) == Array(
            element=Scalar(width), index=Scalar(32)
        )

    def test_unknown_entity(self):
        assert DEFAULT_SYSTEM_MODEL.entity_type("pcc", 64) is None
        assert DEFAULT_SYSTEM_MODEL.entity_type("$pc", 64) is None

    def test_register_file(self):
        assert len(REGISTERS) == 32
        assert len(set(REGISTERS)) == 32
        assert {"zero", "ra", "sp", "a0", "a7", "s11", "t6"} <= set(REGISTERS)

    def test_names(self):
        names = DEFAULT_SYSTEM_MODEL.names()
        assert len(names) == 39
        assert "pc" in DEFAULT_SYSTEM_MODEL
        assert "mem_w" in DEFAULT_SYSTEM_MODEL
        assert "x0" not in DEFAULT_SYSTEM_MODEL

    def test_custom_model(self, catalogue):
        class WithCounter(SystemModel):
            def names(self):
                return super().names() | {"cycles"}

            def entity_type(self, name, xlen):
                if name == "cycles":
                    return Scalar(64)
                return super().entity_type(name, xlen)

        parser = SpecParser(catalogue, system_model=WithCounter())
        assert parser.parse_vexpr("$cycles").type.width == 64


class TestParserConfig:

    def test_defaults(self):
        config = ParserConfig()
        assert config.xlen == 64
        assert config.deferred_typing is False
        assert config.validate() == []

    @pytest.mark.parametrize("xlen", [0, -32, "64", 64.0, True])
    def test_invalid_xlen(self, xlen):
        with pytest.raises(ConfigError) as info:
            ParserConfig(xlen=xlen)
        assert info.value.code == VspecErrorCodes.INVALID_CONFIG

    def test_unusual_xlen_warns(self):
        assert len(ParserConfig(xlen=48).validate()) == 1
        assert len(ParserConfig(xlen=12).validate()) == 2

    def test_warnings_are_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="vspec"):
            SpecParser(config=ParserConfig(xlen=48))
        assert "ParserConfig: xlen 48" in caplog.text

    def test_frozen(self):
        config = ParserConfig()
        with pytest.raises(AttributeError):
            config.xlen = 32
