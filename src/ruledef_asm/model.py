'''
modelo de datos: parámetros, segmentos de bits, reglas y tablas por mnemónico
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .diagnostics import Diagnostic, warning
from .errors import MalformedRule
from .utils import fits

# ---- Parámetros y segmentos ----

@dataclass(frozen=True)
class Parameter:
    """Parámetro de una regla: nombre y ancho declarado (cota de aceptación)."""
    name: str
    width: int    # bits; acepta 0 <= v < 2^width

    def __str__(self) -> str:
        return f"{{{self.name}: u{self.width}}}"

@dataclass(frozen=True)
class Constant:
    """Segmento de valor fijo."""
    width: int
    value: int

@dataclass(frozen=True)
class ParamSlice:
    """Segmento tomado de un parámetro: bits [shift, shift+width) de su valor.

    El ancho emitido es independiente del ancho declarado del parámetro:
    puede truncar (width menor) o extender con ceros (width mayor).
    """
    param: str
    width: int
    shift: int = 0

BitSegment = Union[Constant, ParamSlice]

# ---- Reglas ----

@dataclass(frozen=True)
class Rule:
    """Alternativa de codificación para un mnemónico."""
    mnemonic: str
    parameters: Tuple[Parameter, ...]
    template: Tuple[BitSegment, ...]
    line: Optional[int] = None

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def width(self) -> int:
        """Ancho total emitido por la plantilla, en bits."""
        return sum(seg.width for seg in self.template)

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.mnemonic} {params}".rstrip()

def rule(mnemonic: str, parameters: Iterable[Parameter], template: Iterable[BitSegment],
         *, line: int | None = None) -> Rule:
    """Construye una Rule normalizando el mnemónico y congelando las listas."""
    return Rule(mnemonic=mnemonic.lower(), parameters=tuple(parameters),
                template=tuple(template), line=line)

@dataclass(frozen=True)
class RuleTable:
    """Todas las reglas de un mnemónico, en orden de declaración."""
    mnemonic: str
    rules: Tuple[Rule, ...]

    @property
    def arities(self) -> List[int]:
        return [r.arity for r in self.rules]

    def __len__(self) -> int:
        return len(self.rules)

@dataclass(frozen=True)
class Invocation:
    """Uso de un mnemónico con argumentos ya evaluados (enteros sin signo)."""
    mnemonic: str
    args: Tuple[int, ...]
    line: Optional[int] = None
    col: Optional[int] = None

# ---- Validación en construcción ----

def validate_rule(r: Rule, index: int | None = None) -> None:
    """Lanza MalformedRule si la regla no es coherente por sí misma."""
    seen = set()
    for p in r.parameters:
        if p.name in seen:
            raise MalformedRule(r.mnemonic, rule_index=index, detail=f"parámetro repetido '{p.name}'")
        if p.width < 0:
            raise MalformedRule(r.mnemonic, rule_index=index, detail=f"ancho negativo en '{p.name}'")
        seen.add(p.name)
    for seg in r.template:
        if seg.width < 0:
            raise MalformedRule(r.mnemonic, rule_index=index, detail="segmento con ancho negativo")
        if isinstance(seg, Constant):
            if not fits(seg.value, seg.width):
                raise MalformedRule(r.mnemonic, rule_index=index,
                                    detail=f"constante {seg.value:#x} no cabe en {seg.width} bits")
        elif isinstance(seg, ParamSlice):
            if seg.param not in seen:
                raise MalformedRule(r.mnemonic, rule_index=index,
                                    detail=f"la plantilla usa '{seg.param}', que no es parámetro")
            if seg.shift < 0:
                raise MalformedRule(r.mnemonic, rule_index=index, detail="desplazamiento negativo")
        else:
            raise MalformedRule(r.mnemonic, rule_index=index, detail=f"segmento desconocido: {seg!r}")

def build_table(mnemonic: str, rules: Iterable[Rule], *,
                strict: bool = False) -> Tuple[RuleTable, List[Diagnostic]]:
    """Valida y congela las reglas de un mnemónico.

    Los errores propios de cada regla siempre lanzan MalformedRule. Que las
    alternativas emitan anchos distintos es sólo una convención: se reporta
    como advertencia, o como MalformedRule si strict=True.
    """
    m = mnemonic.lower()
    diags: List[Diagnostic] = []
    frozen = tuple(rules)
    if not frozen:
        raise MalformedRule(m, detail="tabla sin reglas")

    for i, r in enumerate(frozen):
        if r.mnemonic != m:
            raise MalformedRule(m, rule_index=i, detail=f"pertenece a '{r.mnemonic}'")
        validate_rule(r, i)

    reference = frozen[0].width
    for i, r in enumerate(frozen[1:], start=1):
        if r.width != reference:
            detail = (f"emite {r.width} bits pero la regla #0 emite {reference}")
            if strict:
                raise MalformedRule(m, rule_index=i, detail=detail)
            diags.append(warning(f"regla #{i} de '{m}' {detail}", line=r.line,
                                 code="template-width"))

    return RuleTable(mnemonic=m, rules=frozen), diags

def group_rules(rules: Iterable[Rule]) -> Dict[str, List[Rule]]:
    """Agrupa reglas por mnemónico manteniendo el orden de declaración."""
    grouped: Dict[str, List[Rule]] = {}
    for r in rules:
        grouped.setdefault(r.mnemonic, []).append(r)
    return grouped

def build_tables(rules: Iterable[Rule], *,
                 strict: bool = False) -> Tuple[Dict[str, RuleTable], List[Diagnostic]]:
    """Construye una tabla por mnemónico; propaga el primer MalformedRule."""
    tables: Dict[str, RuleTable] = {}
    diags: List[Diagnostic] = []
    for m, rs in group_rules(rules).items():
        table, d = build_table(m, rs, strict=strict)
        tables[m] = table
        diags.extend(d)
    return tables, diags

def lookup(tables: Dict[str, RuleTable], mnemonic: str) -> RuleTable:
    """Devuelve la tabla de un mnemónico o lanza KeyError."""
    m = mnemonic.lower()
    if m not in tables:
        raise KeyError(f"Instrucción desconocida: {mnemonic}")
    return tables[m]
