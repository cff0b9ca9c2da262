"""Document symbol provider for mixc manifests.

Lists every unit with its members as children for the Outline view.
"""

from __future__ import annotations

from lsprotocol import types as lsp

from src.composition.units import MemberDef, UnitDef, UnitKind
from src.devex.lsp.diagnostics import AnalysisResult
from src.devex.lsp.utils import member_range, unit_range


def _unit_detail(decl: UnitDef, result: AnalysisResult) -> str:
    """Build a detail like 'extends Base with A with B'."""
    parts = []
    if decl.base:
        parts.append(f"extends {decl.base}")
    for mixin in decl.mixins:
        parts.append(f"with {mixin}")
    composed = result.composed.get(decl.name)
    if composed is not None and len(composed.order) > 1:
        parts.append("[" + " -> ".join(composed.order) + "]")
    return " ".join(parts)


def _member_detail(m: MemberDef) -> str:
    if m.is_abstract:
        return "abstract"
    return "delegates" if m.delegates else ""


def get_document_symbols(result: AnalysisResult) -> list[lsp.DocumentSymbol]:
    """Extract document symbols from the loaded units."""
    if not result.units:
        return []

    symbols: list[lsp.DocumentSymbol] = []
    for decl in result.units:
        rng = unit_range(result.source, decl.name)
        if rng is None:
            continue
        children: list[lsp.DocumentSymbol] = []
        for m in decl.members:
            mrng = member_range(result.source, decl.name, m.name) or rng
            children.append(
                lsp.DocumentSymbol(
                    name=m.name,
                    kind=lsp.SymbolKind.Method,
                    range=mrng,
                    selection_range=mrng,
                    detail=_member_detail(m),
                )
            )
        symbols.append(
            lsp.DocumentSymbol(
                name=decl.name,
                kind=(lsp.SymbolKind.Interface if decl.kind is UnitKind.MIXIN
                      else lsp.SymbolKind.Class),
                range=rng,
                selection_range=lsp.Range(start=rng.start, end=rng.start),
                detail=_unit_detail(decl, result),
                children=children,
            )
        )
    return symbols
