import pytest
from src.ruledef_asm.lexer import (
    strip_comment, split_ruledef, is_directive,
    split_mnemonic_operands, split_operands, split_top_level,
    is_int_literal, parse_int, split_arguments,
)

# --- strip_comment ---
@pytest.mark.parametrize("src, expected", [
    ("ld 0x215 ; = 0x3315", "ld 0x215"),
    ("; full comment", ""),
    ("   ld 1   ", "ld 1"),
    ("", ""),
])
def test_strip_comment(src, expected):
    assert strip_comment(src) == expected

# --- split_ruledef ---
@pytest.mark.parametrize("src, expected", [
    ("#ruledef test", ("test", False)),
    ("#ruledef test {", ("test", True)),
    ("#ruledef", (None, False)),
    ("#ruledefx", None),
    ("ld 1", None),
])
def test_split_ruledef(src, expected):
    assert split_ruledef(src) == expected

def test_is_directive():
    assert is_directive("#bankdef a")
    assert not is_directive("ld 1")

# --- split_mnemonic_operands ---
@pytest.mark.parametrize("src, mn, tail", [
    ("LD 0x215", "ld", "0x215"),
    ("nop", "nop", ""),
    ("   ", "", ""),
])
def test_split_mnemonic_operands(src, mn, tail):
    assert split_mnemonic_operands(src) == (mn, tail)

# --- split_operands ---
@pytest.mark.parametrize("src, expected", [
    ("1, 2, 3", ["1", "2", "3"]),
    ("{x: u8}, {y: u4}", ["{x: u8}", "{y: u4}"]),
    ("", []),
])
def test_split_operands(src, expected):
    assert split_operands(src) == expected

def test_split_top_level_keeps_empty_pieces():
    assert split_top_level("0x11 @ x[7:0]", "@") == ["0x11", "x[7:0]"]
    assert split_top_level("a @ @ b", "@") == ["a", "", "b"]

@pytest.mark.parametrize("tok, value", [
    ("0x215", 0x215),
    ("0b1010", 10),
    ("42", 42),
    ("007", 7),
    ("0xFF_FF", 0xFFFF),
    ("-3", -3),
])
def test_parse_int(tok, value):
    assert is_int_literal(tok)
    assert parse_int(tok) == value

def test_parse_int_rejects_expressions():
    assert not is_int_literal("x + 1")
    with pytest.raises(ValueError):
        parse_int("label")

@pytest.mark.parametrize("tok", ["0x_", "0b_", "0x", "0b", "0x__", "0bz"])
def test_prefix_without_digits_is_not_a_literal(tok):
    assert not is_int_literal(tok)
    with pytest.raises(ValueError):
        parse_int(tok)

def test_split_arguments_keeps_empty_pieces():
    assert split_arguments("5,") == ["5", ""]
    assert split_arguments(",") == ["", ""]
    assert split_arguments("1, , 2") == ["1", "", "2"]
    assert split_arguments("  ") == []
