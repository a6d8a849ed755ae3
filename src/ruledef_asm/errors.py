'''
jerarquía de errores estructurados del motor de reglas
'''

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

from .diagnostics import Diagnostic, error


class EncodeError(Exception):
    """Base de todos los fallos del motor (ninguno es reintentable).

    Cada subclase guarda los datos necesarios para que la capa de
    diagnósticos construya un mensaje preciso sin volver a analizar nada.
    """

    code = "encode-error"

    def __init__(self, message: str, *, mnemonic: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.mnemonic = mnemonic

    def hint(self) -> Optional[str]:
        return None

    def to_diagnostic(self, *, line: int | None = None, col: int | None = None,
                      file: str | None = None) -> Diagnostic:
        return error(self.message, line=line, col=col, file=file,
                     hint=self.hint(), code=self.code)


class NoMatchingRule(EncodeError):
    """Ninguna regla admite los argumentos dados.

    'failures' tiene una entrada (rule_index, arg_index, width) por cada
    candidata descartada; arg_index/width/value describen la última de ellas.
    """

    code = "no-matching-rule"

    def __init__(self, mnemonic: str, *, arg_index: Optional[int] = None,
                 width: Optional[int] = None, value: Optional[int] = None,
                 failures: Sequence[Tuple[int, int, int]] = (),
                 message: Optional[str] = None):
        if message is None:
            if arg_index is not None:
                message = (f"ninguna regla de '{mnemonic}' admite el argumento "
                           f"#{arg_index} ({value:#x}): excede u{width}")
            else:
                message = f"ninguna regla de '{mnemonic}' admite los argumentos"
        super().__init__(message, mnemonic=mnemonic)
        self.arg_index = arg_index
        self.width = width
        self.value = value
        self.failures: List[Tuple[int, int, int]] = list(failures)

    def hint(self) -> Optional[str]:
        if not self.failures:
            return None
        widths = sorted({w for _, _, w in self.failures})
        return "anchos declarados: " + ", ".join(f"u{w}" for w in widths)


class ArityMismatch(NoMatchingRule):
    """El número de argumentos no coincide con ninguna regla del mnemónico."""

    code = "arity-mismatch"

    def __init__(self, mnemonic: str, *, arg_count: int, arities: Sequence[int]):
        self.arg_count = arg_count
        self.arities = sorted(set(arities))
        message = (f"'{mnemonic}' no acepta {arg_count} argumento(s); "
                   f"aridades válidas: {', '.join(str(a) for a in self.arities) or 'ninguna'}")
        super().__init__(mnemonic, message=message)

    def hint(self) -> Optional[str]:
        return None


class AmbiguousMatch(EncodeError):
    """Varias reglas califican y la política de desempate no elige ninguna."""

    code = "ambiguous-match"

    def __init__(self, mnemonic: str, *, candidates: Sequence[int]):
        self.candidates = list(candidates)
        message = (f"'{mnemonic}' es ambiguo: califican las reglas "
                   f"{', '.join(f'#{i}' for i in self.candidates)}")
        super().__init__(message, mnemonic=mnemonic)

    def hint(self) -> Optional[str]:
        return "use otra política de desempate (last, first, narrowest)"


class MalformedRule(EncodeError):
    """Regla inválida detectada al construir una tabla (no por invocación)."""

    code = "malformed-rule"

    def __init__(self, mnemonic: str, *, rule_index: Optional[int] = None, detail: str):
        self.rule_index = rule_index
        self.detail = detail
        where = f"regla #{rule_index} de '{mnemonic}'" if rule_index is not None else f"'{mnemonic}'"
        super().__init__(f"{where} mal formada: {detail}", mnemonic=mnemonic)


class UnalignedOutput(EncodeError):
    """La salida no ocupa un número entero de bytes y la política lo rechaza."""

    code = "unaligned-output"

    def __init__(self, bit_length: int):
        self.bit_length = bit_length
        short = 8 - bit_length % 8
        super().__init__(f"la salida de {bit_length} bits no está alineada a byte "
                         f"(faltan {short} bit{'s' if short > 1 else ''})")
