'''
selección de regla: aridad, anchos declarados y política de desempate
'''

from __future__ import annotations
from typing import List, Literal, Optional, Sequence, Tuple

from .errors import AmbiguousMatch, ArityMismatch, NoMatchingRule
from .model import Rule, RuleTable
from .utils import fits

TieBreak = Literal["last", "first", "narrowest", "unique"]
TIE_BREAKS: Tuple[str, ...] = ("last", "first", "narrowest", "unique")

def check_tie_break(policy: str) -> TieBreak:
    if policy not in TIE_BREAKS:
        raise ValueError(f"política de desempate inválida: {policy!r} "
                         f"(válidas: {', '.join(TIE_BREAKS)})")
    return policy  # type: ignore[return-value]

def first_misfit(r: Rule, args: Sequence[int]) -> Optional[int]:
    """Índice del primer argumento que no cabe en su parámetro, o None si todos caben."""
    for i, (p, v) in enumerate(zip(r.parameters, args)):
        if not fits(v, p.width):
            return i
    return None

def candidates(table: RuleTable, args: Sequence[int]) -> List[int]:
    """Índices (en orden de declaración) de las reglas que califican.

    Lanza ArityMismatch si ninguna regla tiene la aridad de args.
    """
    idx, _ = _qualify(table, args)
    return idx

def _qualify(table: RuleTable, args: Sequence[int]) -> Tuple[List[int], List[Tuple[int, int, int]]]:
    same_arity = [i for i, r in enumerate(table.rules) if r.arity == len(args)]
    if not same_arity:
        raise ArityMismatch(table.mnemonic, arg_count=len(args), arities=table.arities)
    ok: List[int] = []
    failures: List[Tuple[int, int, int]] = []   # (rule, arg, width)
    for i in same_arity:
        r = table.rules[i]
        bad = first_misfit(r, args)
        if bad is None:
            ok.append(i)
        else:
            failures.append((i, bad, r.parameters[bad].width))
    return ok, failures

def _pick(table: RuleTable, ok: List[int], policy: TieBreak) -> int:
    if len(ok) == 1:
        return ok[0]
    if policy == "last":
        return ok[-1]
    if policy == "first":
        return ok[0]
    if policy == "narrowest":
        # menor ancho total; a igualdad gana la última declarada
        return min(reversed(ok), key=lambda i: table.rules[i].width)
    raise AmbiguousMatch(table.mnemonic, candidates=ok)

def match_index(table: RuleTable, args: Sequence[int], *, tie_break: str = "last") -> int:
    """Como match() pero devuelve el índice de la regla ganadora."""
    policy = check_tie_break(tie_break)
    ok, failures = _qualify(table, args)
    if not ok:
        _, arg_index, width = failures[-1]
        raise NoMatchingRule(table.mnemonic, arg_index=arg_index, width=width,
                             value=args[arg_index], failures=failures)
    return _pick(table, ok, policy)

def match(table: RuleTable, args: Sequence[int], *, tie_break: str = "last") -> Rule:
    """Elige la regla de 'table' que admite 'args'.

    1. filtra por aridad (ArityMismatch si ninguna coincide);
    2. descarta reglas donde algún argumento excede su ancho declarado
       (NoMatchingRule si no queda ninguna);
    3. si quedan varias aplica la política de desempate:
       - last: la última declarada (por defecto);
       - first: la primera declarada;
       - narrowest: la de menor ancho total emitido;
       - unique: lanza AmbiguousMatch.
    """
    return table.rules[match_index(table, args, tie_break=tie_break)]
