'''
expansión de plantillas: de (regla, argumentos) a una secuencia plana de bits
'''

from __future__ import annotations
from typing import Dict, List, Sequence

from .model import BitSegment, Constant, Rule
from .utils import int_to_bits, low_bits

def bind(rule: Rule, args: Sequence[int]) -> Dict[str, int]:
    """Asocia cada parámetro de la regla con su argumento, por posición."""
    if len(args) != rule.arity:
        raise ValueError(f"{rule.mnemonic}: se esperaban {rule.arity} argumentos, hay {len(args)}")
    return {p.name: v for p, v in zip(rule.parameters, args)}

def segment_value(seg: BitSegment, env: Dict[str, int]) -> int:
    """Valor (ya recortado a seg.width bits) que aporta un segmento."""
    if isinstance(seg, Constant):
        return seg.value
    # ParamSlice: se descartan los bits altos aunque el ancho declarado sea mayor
    return low_bits(env[seg.param], seg.width, seg.shift)

def expand(rule: Rule, args: Sequence[int]) -> List[int]:
    """Recorre la plantilla en orden y devuelve los bits (MSB primero).

    Los segmentos se concatenan en orden de declaración: el de la izquierda
    queda en las posiciones más significativas.
    """
    env = bind(rule, args)
    bits: List[int] = []
    for seg in rule.template:
        bits.extend(int_to_bits(segment_value(seg, env), seg.width))
    return bits
