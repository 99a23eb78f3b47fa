"""stencil document handling.

Parses ``stencil.yaml`` into a generic node tree and builds the typed model
the engine executes.

Usage::

    from stencil.document import build_document, load_document

    result = build_document(load_document("stencil.yaml"))
    print(result.options)
    print(result.actions)
    print(result.diagnostics)
"""

from stencil.document.builder import (
    BuildResult,
    DocumentBuilder,
    StructuralError,
    build_document,
    trim_text,
)
from stencil.document.models import (
    Action,
    ActionSet,
    Diagnostic,
    Options,
    OptionsOverrides,
    PromptAction,
    PromptKind,
    Suite,
)
from stencil.document.nodes import (
    DocumentError,
    DocumentSyntaxError,
    Node,
    load_document,
    parse_document,
)

__all__ = [
    "Action",
    "ActionSet",
    "BuildResult",
    "Diagnostic",
    "DocumentBuilder",
    "DocumentError",
    "DocumentSyntaxError",
    "Node",
    "Options",
    "OptionsOverrides",
    "PromptAction",
    "PromptKind",
    "StructuralError",
    "Suite",
    "build_document",
    "load_document",
    "parse_document",
    "trim_text",
]
