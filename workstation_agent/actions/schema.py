"""Action vocabulary the AI model is constrained to emit.

Each action kind is a frozen dataclass. Decisions coming back from the model
are validated into these classes; an unknown kind, an unexpected field or a
field of the wrong type rejects the whole decision instead of being guessed
at.
"""

import json
import math
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type

from ..exceptions import ActionValidationError

Point = Tuple[float, float]
Polyline = Tuple[Point, ...]


@dataclass(frozen=True)
class Action:
    """Base class for all actions."""

    kind: ClassVar[str] = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the wire shape ({"action": kind, ...})."""
        data: Dict[str, Any] = {"action": self.kind}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name == "lines":
                value = [[list(point) for point in line] for line in value]
            data[f.name] = value
        return data


@dataclass(frozen=True)
class Speak(Action):
    kind: ClassVar[str] = "speak"
    text: str = ""


@dataclass(frozen=True)
class MoveMouseToElement(Action):
    kind: ClassVar[str] = "move_mouse_to_element"
    selector: str = ""


@dataclass(frozen=True)
class Click(Action):
    kind: ClassVar[str] = "click"


@dataclass(frozen=True)
class TypeText(Action):
    kind: ClassVar[str] = "type"
    text: str = ""
    enter: bool = False


@dataclass(frozen=True)
class Scroll(Action):
    kind: ClassVar[str] = "scroll"
    selector: str = ""
    pixels: float = 0


@dataclass(frozen=True)
class Doodle(Action):
    kind: ClassVar[str] = "doodle"
    lines: Tuple[Polyline, ...] = ()


@dataclass(frozen=True)
class DrawWithCursor(Action):
    kind: ClassVar[str] = "draw_with_cursor"
    lines: Tuple[Polyline, ...] = ()


@dataclass(frozen=True)
class GenerateImage(Action):
    kind: ClassVar[str] = "generate_image"
    prompt: str = ""


@dataclass(frozen=True)
class FindImage(Action):
    kind: ClassVar[str] = "find_image"
    prompt: str = ""


@dataclass(frozen=True)
class PlaceImageInDoc(Action):
    kind: ClassVar[str] = "place_image_in_doc"


@dataclass(frozen=True)
class ListFiles(Action):
    kind: ClassVar[str] = "list_files"


@dataclass(frozen=True)
class OpenFile(Action):
    kind: ClassVar[str] = "open_file"
    filename: Optional[str] = None


@dataclass(frozen=True)
class SaveActiveFile(Action):
    kind: ClassVar[str] = "save_active_file"
    filename: Optional[str] = None


@dataclass(frozen=True)
class DeleteFile(Action):
    kind: ClassVar[str] = "delete_file"
    filename: Optional[str] = None


@dataclass(frozen=True)
class DragWindow(Action):
    kind: ClassVar[str] = "drag_window"
    selector: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None


ACTION_TYPES: Dict[str, Type[Action]] = {
    cls.kind: cls
    for cls in (
        Speak,
        MoveMouseToElement,
        Click,
        TypeText,
        Scroll,
        Doodle,
        DrawWithCursor,
        GenerateImage,
        FindImage,
        PlaceImageInDoc,
        ListFiles,
        OpenFile,
        SaveActiveFile,
        DeleteFile,
        DragWindow,
    )
}

# Every field the response schema allows on an action object. The model fills
# the ones a kind does not use with null.
KNOWN_FIELDS = ("text", "selector", "query", "prompt", "filename", "enter", "pixels", "x", "y", "lines")

# Fields a kind cannot run without
REQUIRED_FIELDS: Dict[str, Tuple[str, ...]] = {
    "speak": ("text",),
    "move_mouse_to_element": ("selector",),
    "type": ("text",),
    "scroll": ("selector", "pixels"),
    "doodle": ("lines",),
    "draw_with_cursor": ("lines",),
    "generate_image": ("prompt",),
    "find_image": ("prompt",),
}

# One line per action for the model's system instruction
ACTION_REFERENCE: List[str] = [
    '{"action": "speak", "text": "string"}: Say something to the user in the chat to explain what you\'re doing.',
    '{"action": "move_mouse_to_element", "selector": "#element-id"}: Move the mouse cursor to the center of a given element with a natural, curved motion.',
    '{"action": "click"}: Simulate a left mouse click at the current cursor position. This will focus the clicked element (like an input field).',
    '{"action": "type", "text": "string", "enter": boolean (optional)}: Types text into the currently active window\'s focused element. The Document Writer supports rich text and images.',
    '{"action": "scroll", "selector": "string", "pixels": number}: Scrolls a specific element (like a window body) down by a certain number of pixels.',
    '{"action": "doodle", "lines": [[[x,y], [x,y], ...], [[x,y], ...]]}: Opens the doodle pad and draws a series of lines.',
    '{"action": "draw_with_cursor", "lines": [[[x,y], [x,y], ...]]}: Move the cursor along a specific path on the desktop for expressive gestures.',
    '{"action": "generate_image", "prompt": "string"}: Opens the Image Studio and generates an image from the prompt. The image is copied to the clipboard.',
    '{"action": "find_image", "prompt": "string"}: Generates an image in the background (without opening a window) and copies it to the clipboard.',
    '{"action": "place_image_in_doc"}: Places the image from the clipboard into the Document Writer app.',
    '{"action": "list_files"}: Opens the File Explorer to show all saved files.',
    '{"action": "open_file", "filename": "string"}: Opens a file from the file system.',
    '{"action": "save_active_file", "filename": "string"}: Saves the content of the currently active window with the given filename.',
    '{"action": "delete_file", "filename": "string"}: Deletes a file from the file system.',
    '{"action": "drag_window", "selector": "#window-id", "x": number, "y": number}: Drags a window to a new position. Coordinates are relative to the top-left of the desktop.',
]

_NULLABLE_STRING = {"type": ["string", "null"]}
_NULLABLE_NUMBER = {"type": ["number", "null"]}

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "sequence": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "action": {"type": "string", "enum": sorted(ACTION_TYPES)},
                    "text": _NULLABLE_STRING,
                    "selector": _NULLABLE_STRING,
                    "query": _NULLABLE_STRING,
                    "prompt": _NULLABLE_STRING,
                    "filename": _NULLABLE_STRING,
                    "enter": {"type": ["boolean", "null"]},
                    "pixels": _NULLABLE_NUMBER,
                    "x": _NULLABLE_NUMBER,
                    "y": _NULLABLE_NUMBER,
                    "lines": {
                        "type": ["array", "null"],
                        "items": {
                            "type": "array",
                            "items": {
                                "type": "array",
                                "items": {"type": "number"},
                            },
                        },
                    },
                },
                "required": ["action"],
            },
        },
    },
    "required": ["sequence"],
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _coerce_lines(value: Any, index: int) -> Tuple[Polyline, ...]:
    if not isinstance(value, list):
        raise ActionValidationError(f"Action {index}: 'lines' must be a list of polylines")
    polylines = []
    for line in value:
        if not isinstance(line, list):
            raise ActionValidationError(f"Action {index}: each polyline must be a list of points")
        points = []
        for point in line:
            if not (isinstance(point, list) and len(point) == 2 and all(_is_number(c) for c in point)):
                raise ActionValidationError(f"Action {index}: each point must be an [x, y] pair of numbers")
            points.append((float(point[0]), float(point[1])))
        polylines.append(tuple(points))
    return tuple(polylines)


def _coerce_field(name: str, value: Any, index: int) -> Any:
    if name in ("text", "selector", "prompt", "filename"):
        if not isinstance(value, str):
            raise ActionValidationError(f"Action {index}: '{name}' must be a string")
        return value
    if name == "enter":
        if not isinstance(value, bool):
            raise ActionValidationError(f"Action {index}: 'enter' must be a boolean")
        return value
    if name in ("pixels", "x", "y"):
        if not _is_number(value):
            raise ActionValidationError(f"Action {index}: '{name}' must be a number")
        return value
    if name == "lines":
        return _coerce_lines(value, index)
    return value


def parse_action(data: Any, index: int = 0) -> Action:
    """
    Validate one action object from a model decision.

    Args:
        data: Decoded JSON object with an "action" key
        index: Position in the sequence (used in error messages)

    Returns:
        The matching Action instance

    Raises:
        ActionValidationError: If the kind is unknown or a field is malformed
    """
    if not isinstance(data, dict):
        raise ActionValidationError(f"Action {index}: expected an object, got {type(data).__name__}")

    kind = data.get("action")
    if not isinstance(kind, str) or kind not in ACTION_TYPES:
        raise ActionValidationError(f"Action {index}: unknown action kind {kind!r}")

    unexpected = [key for key in data if key != "action" and key not in KNOWN_FIELDS]
    if unexpected:
        raise ActionValidationError(f"Action {index}: unexpected field(s) {', '.join(sorted(unexpected))}")

    cls = ACTION_TYPES[kind]
    accepted = {f.name for f in fields(cls)}
    kwargs: Dict[str, Any] = {}
    for name in accepted:
        value = data.get(name)
        if value is None:
            continue
        kwargs[name] = _coerce_field(name, value, index)

    missing = [name for name in REQUIRED_FIELDS.get(kind, ()) if name not in kwargs]
    if missing:
        raise ActionValidationError(f"Action {index} ({kind}): missing required field(s) {', '.join(missing)}")

    return cls(**kwargs)


def parse_sequence(items: Any) -> List[Action]:
    """Validate a list of action objects, rejecting the list on the first bad entry."""
    if not isinstance(items, list):
        raise ActionValidationError("'sequence' must be a list of actions")
    return [parse_action(item, i) for i, item in enumerate(items)]


def parse_decision(text: str) -> Optional[List[Action]]:
    """
    Parse the model's raw decision text.

    Returns:
        The validated action sequence, or None if the decision carries no
        "sequence" key

    Raises:
        ActionValidationError: If the text is not JSON, not an object, or
            any action fails validation
    """
    try:
        decision = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise ActionValidationError(f"Decision is not valid JSON: {e}") from e

    if not isinstance(decision, dict):
        raise ActionValidationError("Decision must be a JSON object")

    sequence = decision.get("sequence")
    if sequence is None:
        return None
    return parse_sequence(sequence)
