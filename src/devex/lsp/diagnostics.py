"""Diagnostic computation for mixc manifests.

Loads the manifest, builds the unit graph and finalizes every unit, converting
each composition fault into an LSP Diagnostic at the offending unit.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from lsprotocol import types as lsp

from src.composition.engine import ComposedClass, Composer, CompositionError
from src.composition.manifest import ManifestError, load_manifest, locate_unit
from src.composition.units import UnitDef

logger = logging.getLogger(__name__)

DIAGNOSTIC_SOURCE = "mixc"


@dataclass
class AnalysisResult:
    """Cached result of analyzing a manifest."""

    uri: str
    source: str
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)
    units: Optional[list[UnitDef]] = None
    composer: Optional[Composer] = None
    composed: dict[str, ComposedClass] = field(default_factory=dict)


def _make_diagnostic(
    line: int,
    col: int,
    message: str,
    length: int = 1,
    severity: lsp.DiagnosticSeverity = lsp.DiagnosticSeverity.Error,
    source: str = DIAGNOSTIC_SOURCE,
) -> lsp.Diagnostic:
    """Create an LSP Diagnostic.

    Manifest positions are 1-based; LSP uses 0-based.
    """
    line_0 = max(0, line - 1)
    col_0 = max(0, col - 1)
    return lsp.Diagnostic(
        range=lsp.Range(
            start=lsp.Position(line=line_0, character=col_0),
            end=lsp.Position(line=line_0, character=col_0 + length),
        ),
        message=message,
        severity=severity,
        source=source,
    )


def _unit_diagnostic(source: str, unit: Optional[str], message: str,
                     severity=lsp.DiagnosticSeverity.Error) -> lsp.Diagnostic:
    line, col = locate_unit(source, unit) if unit else (0, 0)
    length = len(f'"name": "{unit}"') if line else 1
    return _make_diagnostic(line, col, message, length=length,
                            severity=severity)


def compute_diagnostics(uri: str, source: str) -> AnalysisResult:
    """Run the composition pipeline and return diagnostics."""
    result = AnalysisResult(uri=uri, source=source)

    try:
        result.units = load_manifest(source)
    except ManifestError as e:
        result.diagnostics.append(_make_diagnostic(e.line, e.col, e.message))
        return result

    composer = Composer()
    try:
        composer.define_units(result.units)
    except CompositionError as e:
        result.diagnostics.append(_unit_diagnostic(source, e.unit, e.message))
        return result
    result.composer = composer

    for name, unit in composer.units.items():
        try:
            result.composed[name] = composer.finalize_class(name)
        except CompositionError as e:
            result.diagnostics.append(_unit_diagnostic(source, name, e.message))
            continue
        if unit.is_abstract and not any(
                name in other.mixins or other.base == name
                for other in composer.units.values()):
            result.diagnostics.append(_unit_diagnostic(
                source, name, f"Abstract class '{name}' is never extended",
                severity=lsp.DiagnosticSeverity.Warning))

    logger.debug("%s: %d diagnostic(s)", uri, len(result.diagnostics))
    return result
