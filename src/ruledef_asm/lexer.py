from __future__ import annotations
import re
from typing import List, Optional, Tuple

COMMENT_CHAR = ";"

def strip_comment(line: str) -> str:
    """Remove comments starting with ';'"""
    return line.split(COMMENT_CHAR, 1)[0].strip()

RULEDEF_RE = re.compile(r"^#ruledef\b\s*([A-Za-z_][A-Za-z0-9_]*)?\s*(\{)?\s*$")

def split_ruledef(line: str) -> Optional[Tuple[Optional[str], bool]]:
    """Return (name, opens_block) for '#ruledef [name] [{]', else None."""
    m = RULEDEF_RE.match(line.strip())
    if not m:
        return None
    return m.group(1), m.group(2) is not None

def is_directive(line: str) -> bool:
    return line.strip().startswith('#')

def split_mnemonic_operands(line: str):
    s = line.strip()
    if not s:
        return "", ""
    parts = s.split(None, 1)
    if len(parts) == 1:
        return parts[0].lower(), ""
    return parts[0].lower(), parts[1].strip()

def split_top_level(text: str, sep: str) -> List[str]:
    """Split by 'sep' but not inside (), [] or {}; empty pieces are kept."""
    out = []
    cur = []
    depth = 0
    for ch in text:
        if ch in "([{":
            depth += 1
            cur.append(ch)
        elif ch in ")]}":
            depth = max(0, depth-1)
            cur.append(ch)
        elif ch == sep and depth == 0:
            out.append(''.join(cur).strip())
            cur = []
        else:
            cur.append(ch)
    out.append(''.join(cur).strip())
    return out

def split_operands(op_str: str):
    if not op_str.strip():
        return []
    return [s for s in split_top_level(op_str, ',') if s]

def split_arguments(op_str: str) -> List[str]:
    """Like split_operands but keeps empty pieces ('5,' -> ['5', ''])."""
    if not op_str.strip():
        return []
    return split_top_level(op_str, ',')

INT_RE = re.compile(r"^[+-]?(0x_*[0-9a-fA-F][0-9a-fA-F_]*|0b_*[01][01_]*|[0-9][0-9_]*)$")

def is_int_literal(token: str) -> bool:
    return bool(INT_RE.match(token.strip()))

def parse_int(token: str) -> int:
    """Integer literal: hex '0x', binary '0b' or decimal, '_' allowed as separator."""
    t = token.strip()
    if not INT_RE.match(t):
        raise ValueError(f"Literal entero inválido: {token}")
    s = t.replace("_", "")
    if _leading_zero_decimal(s):
        return int(s, 10)
    return int(s, 0)

def _leading_zero_decimal(t: str) -> bool:
    # int(x, 0) rechaza '007'; lo aceptamos como decimal
    body = t.lstrip("+-").lower()
    return len(body) > 1 and body[0] == "0" and body[1] not in "xb"
