"""Hover provider for mixc manifests.

Hovering a unit name shows its declaration, resolution order and the
provider chain of each member.
"""

from typing import Optional

from lsprotocol import types as lsp

from src.composition.engine import ComposedClass
from src.composition.units import Unit
from src.devex.lsp.diagnostics import AnalysisResult
from src.devex.lsp.utils import string_at_position


def _format_unit_info(unit: Unit, composed: Optional[ComposedClass]) -> str:
    header = f"{'abstract ' if unit.is_abstract else ''}{unit.kind.value} {unit.name}"
    if unit.base:
        header += f" extends {unit.base}"
    for mixin in unit.mixins:
        header += f" with {mixin}"
    lines = [f"```\n{header}\n```"]

    if composed is None:
        lines.append("\n*Composition failed; see diagnostics.*")
        return "\n".join(lines)

    lines.append("\n**Resolution order:** " +
                 " → ".join(f"`{u}`" for u in composed.order))
    if composed.table.chains:
        lines.append("\n**Members:**")
        for name, chain in composed.table.chains.items():
            if chain.providers:
                providers = " → ".join(chain.providers)
            else:
                providers = "*abstract*"
            lines.append(f"- `{name}`: {providers}")
    return "\n".join(lines)


def get_hover_info(
    result: AnalysisResult, position: lsp.Position
) -> Optional[lsp.Hover]:
    """Return hover information for the unit name at the given position."""
    if result.composer is None:
        return None
    word = string_at_position(result.source, position)
    if word is None or word not in result.composer.units:
        return None
    content = _format_unit_info(result.composer.units[word],
                                result.composed.get(word))
    return lsp.Hover(
        contents=lsp.MarkupContent(
            kind=lsp.MarkupKind.Markdown,
            value=content,
        ),
    )
