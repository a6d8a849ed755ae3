'''
clase Diagnostic y helpers (ubicación, severidad, código de error)
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, Literal

# Severidad de los diagnósticos (en español)
Severity = Literal["error", "advertencia", "nota"]

_SEV_TO_LABEL = {
    "error": "ERROR",
    "advertencia": "ADVERTENCIA",
    "nota": "NOTA",
}

@dataclass(frozen=True)
class Diagnostic:
    """Problema detectado al construir tablas, parsear o codificar.

    'code' identifica el tipo de fallo (p.ej. 'no-matching-rule') para que
    la capa que presenta mensajes pueda filtrarlos sin comparar textos.
    """
    severity: Severity
    message: str
    line: Optional[int] = None
    col: Optional[int] = None
    hint: Optional[str] = None
    file: Optional[str] = None
    code: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def __str__(self) -> str:
        loc = ""
        if self.file is not None:
            loc += f"{self.file}:"
        if self.line is not None:
            loc += f"{self.line}"
            if self.col is not None:
                loc += f":{self.col}"
        if loc:
            loc += ": "
        sev = _SEV_TO_LABEL.get(self.severity, str(self.severity).upper())
        core = f"{sev}: {self.message}"
        if self.code:
            core += f" [{self.code}]"
        if self.hint:
            core += f"  (pista: {self.hint})"
        return loc + core

def error(message: str, *, line: int | None = None, col: int | None = None,
          file: str | None = None, hint: str | None = None,
          code: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo error."""
    return Diagnostic("error", message, line, col, hint, file, code)

def warning(message: str, *, line: int | None = None, col: int | None = None,
            file: str | None = None, hint: str | None = None,
            code: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo advertencia."""
    return Diagnostic("advertencia", message, line, col, hint, file, code)

def has_errors(diags: Iterable[Diagnostic]) -> bool:
    return any(d.is_error for d in diags)
