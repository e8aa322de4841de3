"""Action vocabulary and decision validation."""

from .schema import (
    ACTION_REFERENCE,
    ACTION_TYPES,
    RESPONSE_SCHEMA,
    Action,
    Click,
    DeleteFile,
    Doodle,
    DragWindow,
    DrawWithCursor,
    FindImage,
    GenerateImage,
    ListFiles,
    MoveMouseToElement,
    OpenFile,
    PlaceImageInDoc,
    SaveActiveFile,
    Scroll,
    Speak,
    TypeText,
    parse_action,
    parse_decision,
    parse_sequence,
)

__all__ = [
    "ACTION_REFERENCE",
    "ACTION_TYPES",
    "RESPONSE_SCHEMA",
    "Action",
    "Click",
    "DeleteFile",
    "Doodle",
    "DragWindow",
    "DrawWithCursor",
    "FindImage",
    "GenerateImage",
    "ListFiles",
    "MoveMouseToElement",
    "OpenFile",
    "PlaceImageInDoc",
    "SaveActiveFile",
    "Scroll",
    "Speak",
    "TypeText",
    "parse_action",
    "parse_decision",
    "parse_sequence",
]
