from __future__ import annotations
import argparse, sys
from typing import List, Tuple

from .parser import parse, ParseResult
from .encoding import encode, EncodeResult
from .matcher import TIE_BREAKS
from .packer import PADDINGS
from .diagnostics import Diagnostic, has_errors
from .writers import write_hex, write_bin, write_binary

def assemble_text(text: str, *, filename: str | None = None, tie_break: str = "last",
                  padding: str = "zero", strict: bool = False) -> Tuple[ParseResult, List[Diagnostic], EncodeResult]:
    """Parsea las reglas y sentencias y codifica cada sentencia.
    Devuelve (parse_result, diagnostics_totales, enc_result)."""
    parsed, diags_parse = parse(text, filename=filename, strict=strict)
    enc = encode(parsed.invocations, parsed.tables, tie_break=tie_break,
                 padding=padding, file=filename)
    diags = list(diags_parse) + list(enc.diagnostics)
    return parsed, diags, enc

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Rule-based instruction encoder")
    ap.add_argument("source", help="archivo .asm con bloques #ruledef y sentencias")
    ap.add_argument("out", help="archivo de salida")
    ap.add_argument("--format", choices=("hex", "bin", "raw"), default="hex",
                    help="hex: una instrucción por línea; bin: bits ASCII; raw: bytes del flujo completo")
    ap.add_argument("--tie-break", choices=TIE_BREAKS, default="last",
                    help="política cuando varias reglas admiten los argumentos")
    ap.add_argument("--padding", choices=PADDINGS, default="zero",
                    help="qué hacer si la salida no ocupa un número entero de bytes")
    ap.add_argument("--strict", action="store_true",
                    help="anchos de plantilla distintos en un mismo mnemónico son error")
    args = ap.parse_args(argv)

    try:
        with open(args.source, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as ex:
        print(f"ERROR: no pude leer {args.source}: {ex}", file=sys.stderr)
        return 2

    parsed, diags, enc = assemble_text(text, filename=args.source, tie_break=args.tie_break,
                                       padding=args.padding, strict=args.strict)

    # imprimimos todo; si hay error, devolvemos código 1
    for d in diags:
        print(d, file=sys.stderr)

    if has_errors(diags):
        return 1

    try:
        if args.format == "hex":
            write_hex(enc.words, args.out)
        elif args.format == "bin":
            write_bin(enc.words, args.out)
        else:
            write_binary(enc.data, args.out)
    except OSError as ex:
        print(f"ERROR al escribir salidas: {ex}", file=sys.stderr)
        return 3

    print(f"OK: {len(enc.words)} instrucciones, {len(enc.data)} bytes → {args.out}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
