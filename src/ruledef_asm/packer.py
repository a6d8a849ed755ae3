'''
empaquetado de bits en bytes (MSB primero dentro de cada byte)
'''

from __future__ import annotations
from typing import Literal, Sequence, Tuple

from .errors import UnalignedOutput

Padding = Literal["zero", "reject"]
PADDINGS: Tuple[str, ...] = ("zero", "reject")

def check_padding(padding: str) -> Padding:
    if padding not in PADDINGS:
        raise ValueError(f"política de relleno inválida: {padding!r} "
                         f"(válidas: {', '.join(PADDINGS)})")
    return padding  # type: ignore[return-value]

def pack(bits: Sequence[int], *, padding: str = "zero") -> bytes:
    """Escribe los bits en bytes sucesivos, el primero en el bit 7 del byte 0.

    Si el total no es múltiplo de 8:
      - padding='zero': el último byte se completa con ceros en sus bits bajos;
      - padding='reject': lanza UnalignedOutput.
    """
    policy = check_padding(padding)
    n = len(bits)
    if n % 8 and policy == "reject":
        raise UnalignedOutput(n)
    out = bytearray((n + 7) // 8)
    for i, b in enumerate(bits):
        if b:
            out[i >> 3] |= 0x80 >> (i & 7)
    return bytes(out)
