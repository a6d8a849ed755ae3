# src/ruledef_asm/parser.py
from __future__ import annotations
import re
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from .lexer import (
    strip_comment,
    split_ruledef,
    is_directive,
    split_mnemonic_operands,
    split_operands,
    split_arguments,
    split_top_level,
    is_int_literal,
    parse_int,
)
from .model import (
    BitSegment, Constant, Invocation, Parameter, ParamSlice, Rule, RuleTable,
    build_table, group_rules, rule, validate_rule,
)
from .errors import MalformedRule
from .diagnostics import Diagnostic, error
from .utils import literal_width

MNEMONIC_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")
SYMBOL_RE   = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
PARAM_RE    = re.compile(r"^\{\s*(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*:\s*(?P<type>[A-Za-z][A-Za-z0-9]*)\s*\}$")
UTYPE_RE    = re.compile(r"^u(?P<width>\d+)$")
SIZED_RE    = re.compile(r"^(?P<base>[^`]+)`(?P<width>\d+)$")
SLICE_RE    = re.compile(r"^(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*\[\s*(?P<hi>\d+)\s*:\s*(?P<lo>\d+)\s*\]$")

@dataclass(frozen=True)
class ParseResult:
    """Tablas de reglas por mnemónico e invocaciones en orden de aparición."""
    tables: Dict[str, RuleTable]
    invocations: List[Invocation]
    ruledefs: List[str]

# ---------------- Cabecera y plantilla de una regla ----------------

def _parse_head(head: str) -> Tuple[str, List[Parameter]]:
    mnemonic, tail = split_mnemonic_operands(head)
    if not MNEMONIC_RE.match(mnemonic):
        raise ValueError(f"Mnemónico inválido: '{mnemonic}'")
    params: List[Parameter] = []
    for tok in split_operands(tail):
        m = PARAM_RE.match(tok)
        if not m:
            raise ValueError(f"Parámetro inválido: '{tok}' (esperado {{nombre: uN}})")
        t = UTYPE_RE.match(m.group("type"))
        if not t:
            raise ValueError(f"Tipo no soportado: '{m.group('type')}' (sólo uN sin signo)")
        params.append(Parameter(m.group("name"), int(t.group("width"))))
    return mnemonic, params

def _literal(token: str, width: Optional[int]) -> Constant:
    value = parse_int(token)
    if value < 0:
        raise ValueError(f"Constante negativa: {token}")
    if width is None:
        width = literal_width(token)
        if width is None:
            raise ValueError(f"El literal decimal '{token}' requiere ancho explícito (p.ej. {token}`8)")
    return Constant(width=width, value=value)

def _parse_segment(token: str, params: Dict[str, Parameter]) -> BitSegment:
    t = token.strip()
    if not t:
        raise ValueError("Segmento vacío en la plantilla")

    m = SLICE_RE.match(t)
    if m:
        hi, lo = int(m.group("hi")), int(m.group("lo"))
        if hi < lo:
            raise ValueError(f"Rango de bits inválido: '{t}'")
        return ParamSlice(param=m.group("name"), width=hi - lo + 1, shift=lo)

    width: Optional[int] = None
    m = SIZED_RE.match(t)
    if m:
        t = m.group("base").strip()
        width = int(m.group("width"))

    if is_int_literal(t):
        return _literal(t, width)
    if SYMBOL_RE.match(t):
        if width is None:
            p = params.get(t)
            if p is None:
                raise ValueError(f"Parámetro desconocido en la plantilla: '{t}'")
            width = p.width
        return ParamSlice(param=t, width=width)
    raise ValueError(f"Segmento no soportado: '{token.strip()}'")

def parse_template(expr: str, params: List[Parameter]) -> List[BitSegment]:
    """Segmentos separados por '@'; el de la izquierda es el más significativo."""
    by_name = {p.name: p for p in params}
    return [_parse_segment(tok, by_name) for tok in split_top_level(expr, '@')]

# ---------------- Parser principal ----------------

def parse(text: str, *, filename: Optional[str] = None,
          strict: bool = False) -> Tuple[ParseResult, List[Diagnostic]]:
    """
    Devuelve (ParseResult, diagnostics).

    Reglas:
      - Comentarios: ';' hasta fin de línea.
      - '#ruledef [nombre]' seguido de un bloque '{ ... }' con reglas
        'mnem {a: uN}, {b: uM} => plantilla' (plantilla en la misma línea o
        en un bloque '{ ... }' propio).
      - Fuera de un #ruledef, cada línea es 'mnem arg, arg, ...' con
        argumentos literales enteros (no se evalúan expresiones).
    """
    rules: List[Rule] = []
    invocations: List[Invocation] = []
    ruledefs: List[str] = []
    diags: List[Diagnostic] = []

    state = "top"        # top | open | body | block_open | block
    ruledef_line = 0
    pending: Optional[Tuple[str, List[Parameter], int]] = None
    block: List[str] = []

    def _finish(lines: List[str], lineno: int) -> None:
        nonlocal pending
        head, pending = pending, None
        if head is None:
            return    # la cabecera ya tenía errores
        mnemonic, params, hline = head
        exprs = [l for l in lines if l]
        if len(exprs) != 1:
            diags.append(error("El cuerpo de una regla debe ser una única expresión",
                               line=lineno, file=filename))
            return
        try:
            template = parse_template(exprs[0], params)
        except ValueError as ex:
            diags.append(error(str(ex), line=lineno, file=filename))
            return
        r = rule(mnemonic, params, template, line=hline)
        index = sum(1 for x in rules if x.mnemonic == r.mnemonic)
        try:
            validate_rule(r, index)
        except MalformedRule as ex:
            diags.append(ex.to_diagnostic(line=hline, file=filename))
            return
        rules.append(r)

    def _rule_line(core: str, lineno: int) -> str:
        """Procesa 'cabecera => cola' y devuelve el siguiente estado."""
        nonlocal pending, block
        if "=>" not in core:
            diags.append(error("Se esperaba '=>' en la definición de regla", line=lineno, file=filename))
            return "body"
        head, tail = core.split("=>", 1)
        try:
            mnemonic, params = _parse_head(head)
            pending = (mnemonic, params, lineno)
        except ValueError as ex:
            diags.append(error(str(ex), line=lineno, file=filename))
            pending = None
        tail = tail.strip()
        if not tail:
            return "block_open"
        if tail.startswith("{"):
            if tail.endswith("}"):
                _finish([tail[1:-1].strip()], lineno)
                return "body"
            block = [tail[1:].strip()]
            return "block"
        _finish([tail], lineno)
        return "body"

    for lineno, raw in enumerate(text.splitlines(), start=1):
        core = strip_comment(raw)
        if not core:
            continue

        if state == "open":
            if not core.startswith("{"):
                diags.append(error("Se esperaba '{' tras #ruledef", line=lineno, file=filename))
                state = "top"
                continue
            state = "body"
            core = core[1:].strip()
            if not core:
                continue

        if state == "block_open":
            if not core.startswith("{"):
                diags.append(error("Se esperaba '{' con la plantilla de la regla", line=lineno, file=filename))
                pending = None
                state = "body"
                continue
            rest = core[1:].strip()
            if rest.endswith("}"):
                _finish([rest[:-1].strip()], lineno)
                state = "body"
            else:
                block = [rest]
                state = "block"
            continue

        if state == "block":
            if core.endswith("}"):
                block.append(core[:-1].strip())
                _finish(block, lineno)
                block = []
                state = "body"
            else:
                block.append(core)
            continue

        if state == "body":
            if core == "}":
                state = "top"
            else:
                state = _rule_line(core, lineno)
            continue

        # state == "top"
        rd = split_ruledef(core)
        if rd is not None:
            name, opens = rd
            ruledefs.append(name or "")
            ruledef_line = lineno
            state = "body" if opens else "open"
            continue
        if is_directive(core):
            diags.append(error(f"Directiva no soportada: '{core.split()[0]}'", line=lineno,
                               file=filename, code="unsupported-directive"))
            continue

        col = len(raw) - len(raw.lstrip()) + 1
        mnemonic, op_str = split_mnemonic_operands(core)
        if not MNEMONIC_RE.match(mnemonic):
            diags.append(error(f"Mnemónico inválido: '{mnemonic}'", line=lineno, col=col, file=filename))
            continue
        args: List[int] = []
        ok = True
        for tok in split_arguments(op_str):
            if not tok:
                diags.append(error("Argumento vacío", line=lineno, col=col, file=filename,
                                   hint="sobra o falta una coma"))
                ok = False
                break
            if not is_int_literal(tok):
                diags.append(error(f"Argumento no soportado: '{tok}'", line=lineno, col=col, file=filename,
                                   hint="sólo literales enteros; las expresiones se evalúan antes"))
                ok = False
                continue
            v = parse_int(tok)
            if v < 0:
                diags.append(error(f"Argumento negativo: '{tok}'", line=lineno, col=col, file=filename,
                                   hint="los argumentos son enteros sin signo"))
                ok = False
                continue
            args.append(v)
        if ok:
            invocations.append(Invocation(mnemonic=mnemonic, args=tuple(args), line=lineno, col=col))

    if state != "top":
        diags.append(error("#ruledef sin cerrar", line=ruledef_line, file=filename))

    tables: Dict[str, RuleTable] = {}
    for m, rs in group_rules(rules).items():
        try:
            table, d = build_table(m, rs, strict=strict)
        except MalformedRule as ex:
            line = rs[ex.rule_index].line if ex.rule_index is not None else None
            diags.append(ex.to_diagnostic(line=line, file=filename))
            continue
        tables[m] = table
        diags.extend(replace(x, file=filename) for x in d)

    return ParseResult(tables=tables, invocations=invocations, ruledefs=ruledefs), diags
