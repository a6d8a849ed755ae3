'''
manejo de bits (fits, rebanadas bajas, anchos de literales, formatos)
'''

from __future__ import annotations
from typing import Iterable, Optional, Sequence

def fits(value: int, width: int) -> bool:
    """Devuelve True si value está en [0, 2^width) (sin signo de width bits).

    Nunca lanza: un ancho negativo simplemente no admite ningún valor.
    """
    if width < 0:
        return False
    return 0 <= value < (1 << width)

def mask(width: int) -> int:
    """Máscara con los 'width' bits bajos a 1."""
    if width < 0:
        raise ValueError("width no puede ser negativo")
    return (1 << width) - 1

def low_bits(value: int, width: int, shift: int = 0) -> int:
    """Bits [shift, shift+width) de value, es decir (value >> shift) mod 2^width."""
    if shift < 0:
        raise ValueError("shift no puede ser negativo")
    return (value >> shift) & mask(width)

def int_to_bits(value: int, width: int) -> list[int]:
    """Lista de 'width' bits (0/1), el más significativo primero."""
    v = value & mask(width)
    return [(v >> (width - 1 - i)) & 1 for i in range(width)]

def bits_to_int(bits: Iterable[int]) -> int:
    """Interpreta una secuencia de bits (MSB primero) como entero sin signo."""
    out = 0
    for b in bits:
        out = (out << 1) | (b & 1)
    return out

def literal_width(token: str) -> Optional[int]:
    """Ancho implícito de un literal: 4 bits por dígito hex, 1 por dígito binario.

    Los literales decimales no tienen ancho implícito (None).
    """
    t = token.strip().lower().replace("_", "")
    if t.startswith("0x"):
        return 4 * len(t[2:])
    if t.startswith("0b"):
        return len(t[2:])
    return None

def to_hex(data: bytes, *, prefix: bool = True) -> str:
    """Bytes como una sola cadena hexadecimal (con o sin prefijo 0x)."""
    s = data.hex()
    return ("0x" + s) if prefix else s

def to_bin(bits: Sequence[int]) -> str:
    """Secuencia de bits como cadena '0'/'1'."""
    return "".join("1" if b else "0" for b in bits)
