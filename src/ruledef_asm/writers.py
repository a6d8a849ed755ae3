from __future__ import annotations
from typing import Iterable, List
from .utils import to_hex, to_bin
from .encoding import Encoded

def to_hex_lines(words: Iterable[Encoded]) -> List[str]:
    return [to_hex(w.data) for w in words]

def to_bin_lines(words: Iterable[Encoded]) -> List[str]:
    # bits exactos de cada instrucción, sin relleno
    return [to_bin(w.bits) for w in words]

def write_hex(words: Iterable[Encoded], path: str) -> None:
    lines = to_hex_lines(words)
    with open(path, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")

def write_bin(words: Iterable[Encoded], path: str) -> None:
    lines = to_bin_lines(words)
    with open(path, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")

def write_binary(data: bytes, path: str) -> None:
    with open(path, "wb") as f:
        f.write(data)
