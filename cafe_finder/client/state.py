from dataclasses import dataclass
from enum import Enum

DEFAULT_BUTTON_LABEL = "✨ Find Cafes Near Me"
BUSY_BUTTON_LABEL = "searching..."


class SearchState(str, Enum):
    IDLE = "idle"
    LOCATING = "locating"
    SEARCHING = "searching"
    DISPLAYING_RESULTS = "displaying_results"
    DISPLAYING_EMPTY = "displaying_empty"
    FAILED = "failed"


class StatusKind(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class StatusLine:
    message: str
    kind: StatusKind


@dataclass
class SearchButton:
    disabled: bool = False
    label: str = DEFAULT_BUTTON_LABEL

    def set_busy(self):
        self.disabled = True
        self.label = BUSY_BUTTON_LABEL

    def reset(self):
        self.disabled = False
        self.label = DEFAULT_BUTTON_LABEL
