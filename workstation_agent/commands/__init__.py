"""Command execution layer for desktop actions."""

from .base import Command
from .doodle import DoodleCommand
from .drag_window import DragWindowCommand
from .executor import ActionInterpreter
from .files import DeleteFileCommand, ListFilesCommand, OpenFileCommand, SaveActiveFileCommand
from .images import FindImageCommand, GenerateImageCommand, PlaceImageCommand
from .pointer import ClickCommand, DrawWithCursorCommand, MoveMouseCommand, ScrollCommand
from .speak import SpeakCommand
from .type_text import TypeCommand

__all__ = [
    "ActionInterpreter",
    "ClickCommand",
    "Command",
    "DeleteFileCommand",
    "DoodleCommand",
    "DragWindowCommand",
    "DrawWithCursorCommand",
    "FindImageCommand",
    "GenerateImageCommand",
    "ListFilesCommand",
    "MoveMouseCommand",
    "OpenFileCommand",
    "PlaceImageCommand",
    "SaveActiveFileCommand",
    "ScrollCommand",
    "SpeakCommand",
    "TypeCommand",
]
