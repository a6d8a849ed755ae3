import pytest
from src.ruledef_asm.model import (
    Parameter, Constant, ParamSlice, rule, build_table, build_tables, group_rules, lookup,
)
from src.ruledef_asm.errors import MalformedRule

def _ld(width, opcode, emit):
    return rule("ld", [Parameter("x", width)], [Constant(8, opcode), ParamSlice("x", emit)])

def test_rule_properties():
    r = _ld(16, 0x22, 16)
    assert r.arity == 1
    assert r.width == 24
    assert str(r) == "ld {x: u16}"

def test_rule_is_immutable():
    r = _ld(8, 0x11, 24)
    assert isinstance(r.parameters, tuple) and isinstance(r.template, tuple)
    with pytest.raises(Exception):
        r.mnemonic = "st"

def test_build_table_warns_on_width_disagreement():
    table, diags = build_table("LD", [_ld(8, 0x11, 24), _ld(16, 0x22, 16), _ld(24, 0x33, 8)])
    assert table.mnemonic == "ld"
    assert table.arities == [1, 1, 1]
    assert len(table) == 3
    assert [d.code for d in diags] == ["template-width", "template-width"]
    assert all(d.severity == "advertencia" for d in diags)

def test_build_table_strict_rejects_width_disagreement():
    with pytest.raises(MalformedRule) as ei:
        build_table("ld", [_ld(8, 0x11, 24), _ld(16, 0x22, 16)], strict=True)
    assert ei.value.rule_index == 1

def test_build_table_same_width_is_silent():
    _, diags = build_table("ld", [_ld(8, 0x11, 8), _ld(16, 0x22, 8)], strict=True)
    assert diags == []

@pytest.mark.parametrize("bad, detail", [
    (rule("ld", [Parameter("x", 8)], [Constant(4, 0x11)]), "no cabe"),
    (rule("ld", [Parameter("x", 8)], [ParamSlice("y", 8)]), "no es parámetro"),
    (rule("ld", [Parameter("x", 8), Parameter("x", 4)], [ParamSlice("x", 8)]), "repetido"),
    (rule("ld", [Parameter("x", 8)], [ParamSlice("x", 8, shift=-1)]), "desplazamiento"),
    (rule("ld", [Parameter("x", -1)], [ParamSlice("x", 8)]), "negativo"),
])
def test_malformed_rules(bad, detail):
    with pytest.raises(MalformedRule) as ei:
        build_table("ld", [bad])
    assert detail in ei.value.message
    assert ei.value.rule_index == 0

def test_table_rejects_foreign_mnemonic_and_empty():
    with pytest.raises(MalformedRule):
        build_table("ld", [rule("st", [], [Constant(8, 1)])])
    with pytest.raises(MalformedRule):
        build_table("ld", [])

def test_build_tables_and_lookup():
    rs = [_ld(8, 0x11, 8), rule("nop", [], [Constant(8, 0)]), _ld(16, 0x22, 8)]
    assert list(group_rules(rs)) == ["ld", "nop"]
    tables, diags = build_tables(rs)
    assert not diags
    assert len(lookup(tables, "LD")) == 2
    with pytest.raises(KeyError):
        lookup(tables, "jmp")
