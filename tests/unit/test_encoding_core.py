import pytest
from src.ruledef_asm.model import Parameter, Constant, ParamSlice, Invocation, rule, build_table
from src.ruledef_asm.encoding import encode, encode_one
from src.ruledef_asm.errors import UnalignedOutput, NoMatchingRule

def _tables():
    ld, _ = build_table("ld", [
        rule("ld", [Parameter("x", 8)],  [Constant(8, 0x11), ParamSlice("x", 24)]),
        rule("ld", [Parameter("x", 16)], [Constant(8, 0x22), ParamSlice("x", 16)]),
        rule("ld", [Parameter("x", 24)], [Constant(8, 0x33), ParamSlice("x", 8)]),
    ])
    nib, _ = build_table("nib", [rule("nib", [Parameter("n", 4)], [ParamSlice("n", 4)])])
    return {"ld": ld, "nib": nib}

def test_encode_one_fixture_bytes():
    w = encode_one(_tables()["ld"], [0x215])
    assert w.data == bytes([0x33, 0x15])
    assert w.bit_length == 16
    assert w.rule_index == 2
    assert w.rule.parameters[0].width == 24

def test_encode_one_is_idempotent():
    t = _tables()["ld"]
    a = encode_one(t, [0x215])
    b = encode_one(t, [0x215])
    assert a == b and a.data == b.data

def test_encode_one_reject_unaligned_rule():
    with pytest.raises(UnalignedOutput):
        encode_one(_tables()["nib"], [0xA], padding="reject")
    assert encode_one(_tables()["nib"], [0xA]).data == b"\xa0"

def test_encode_one_propagates_match_errors():
    with pytest.raises(NoMatchingRule):
        encode_one(_tables()["ld"], [0x1000000])

def test_batch_collects_diagnostics_and_continues():
    invs = [
        Invocation("ld", (0x215,), line=1),
        Invocation("ld", (0x1000000,), line=2),
        Invocation("ld", (), line=3),
        Invocation("jmp", (1,), line=4),
        Invocation("ld", (0x12,), line=5),
    ]
    enc = encode(invs, _tables(), file="t.asm")
    assert [w.line for w in enc.words] == [1, 5]
    assert [d.code for d in enc.diagnostics] == ["no-matching-rule", "arity-mismatch", "unknown-mnemonic"]
    assert [d.line for d in enc.diagnostics] == [2, 3, 4]
    assert all(d.file == "t.asm" for d in enc.diagnostics)
    assert enc.data == bytes([0x33, 0x15, 0x33, 0x12])

def test_stream_concatenates_bits_without_per_instruction_padding():
    invs = [Invocation("nib", (0xA,)), Invocation("nib", (0x5,))]
    enc = encode(invs, _tables(), padding="reject")
    assert not enc.diagnostics
    assert enc.data == b"\xa5"
    assert len(enc.bits) == 8

def test_stream_unaligned_reject_is_a_diagnostic():
    enc = encode([Invocation("nib", (0xA,))], _tables(), padding="reject")
    assert [d.code for d in enc.diagnostics] == ["unaligned-output"]
    assert enc.data == b""
    assert len(enc.words) == 1

def test_ambiguous_under_unique_policy():
    enc = encode([Invocation("ld", (0x215,), line=9)], _tables(), tie_break="unique")
    assert [d.code for d in enc.diagnostics] == ["ambiguous-match"]
    assert "#1, #2" in enc.diagnostics[0].message

def test_invalid_options_fail_fast():
    with pytest.raises(ValueError):
        encode([], _tables(), tie_break="middle")
    with pytest.raises(ValueError):
        encode([], _tables(), padding="ones")
