# src/ruledef_asm/encoding.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .model import Invocation, Rule, RuleTable, lookup
from .matcher import check_tie_break, match_index
from .expander import expand
from .packer import check_padding, pack
from .errors import EncodeError
from .diagnostics import Diagnostic, error

# ---------------- Resultados de codificación ----------------

@dataclass(frozen=True)
class Encoded:
    mnemonic: str
    args: Tuple[int, ...]
    bits: Tuple[int, ...]
    rule: Rule
    rule_index: int
    line: Optional[int] = None
    col: Optional[int] = None

    @property
    def bit_length(self) -> int:
        return len(self.bits)

    @property
    def data(self) -> bytes:
        # rellenado con ceros si la regla no emite un número entero de bytes
        return pack(self.bits)

@dataclass(frozen=True)
class EncodeResult:
    words: List[Encoded]
    diagnostics: List[Diagnostic]
    data: bytes = b""

    @property
    def bits(self) -> List[int]:
        """Concatenación bit a bit de todas las instrucciones, en orden."""
        out: List[int] = []
        for w in self.words:
            out.extend(w.bits)
        return out

# ---------------- Codificación de una invocación ----------------

def encode_one(
    table: RuleTable,
    args: Sequence[int],
    *,
    tie_break: str = "last",
    padding: str = "zero",
    line: int | None = None,
    col: int | None = None,
) -> Encoded:
    """Selecciona la regla, expande su plantilla y devuelve el Encoded.

    Propaga NoMatchingRule/ArityMismatch/AmbiguousMatch del matcher y
    UnalignedOutput si padding='reject' y la regla no está alineada a byte.
    """
    args_t = tuple(args)
    idx = match_index(table, args_t, tie_break=tie_break)
    r = table.rules[idx]
    bits = tuple(expand(r, args_t))
    # con 'reject' se valida la alineación aquí mismo
    pack(bits, padding=padding)
    return Encoded(mnemonic=table.mnemonic, args=args_t, bits=bits, rule=r,
                   rule_index=idx, line=line, col=col)

# ---------------- Codificador por lotes ----------------

def encode(
    invocations: Iterable[Invocation],
    tables: Dict[str, RuleTable],
    *,
    tie_break: str = "last",
    padding: str = "zero",
    file: str | None = None,
) -> EncodeResult:
    """Codifica cada invocación de forma independiente.

    Un fallo en una invocación no detiene las demás: se convierte en un
    diagnóstico con su línea y se sigue con la siguiente. El flujo completo
    se empaqueta al final con la política de relleno indicada.
    """
    check_tie_break(tie_break)
    check_padding(padding)
    diags: List[Diagnostic] = []
    words: List[Encoded] = []

    for inv in invocations:
        try:
            table = lookup(tables, inv.mnemonic)
        except KeyError:
            diags.append(error(f"Instrucción desconocida: {inv.mnemonic}", line=inv.line,
                               col=inv.col, file=file, code="unknown-mnemonic"))
            continue
        try:
            # la alineación sólo se exige sobre el flujo completo
            w = encode_one(table, inv.args, tie_break=tie_break,
                           line=inv.line, col=inv.col)
        except EncodeError as ex:
            diags.append(ex.to_diagnostic(line=inv.line, col=inv.col, file=file))
            continue
        words.append(w)

    stream: List[int] = []
    for w in words:
        stream.extend(w.bits)
    try:
        data = pack(stream, padding=padding)
    except EncodeError as ex:
        diags.append(ex.to_diagnostic(file=file))
        data = b""

    return EncodeResult(words=words, diagnostics=diags, data=data)
