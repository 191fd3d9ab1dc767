from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class Phase(Enum):
    """Observable steps of a watermarking run, in the order they occur."""
    LOAD = "load"
    FONT_STANDARD = "font_standard"
    FONT_DOWNLOAD = "font_download"
    FONT_SOURCE_ATTEMPT = "font_source_attempt"
    FONT_EMBED = "font_embed"
    APPLY = "apply"
    FINALIZE = "finalize"


@dataclass(frozen=True)
class StatusEvent:
    phase: Phase
    message: str


StatusCallback = Callable[[StatusEvent], None]


def emit(on_status: Optional[StatusCallback], phase: Phase, message: str):
    """Sends one event to the listener, if there is one."""
    if on_status is not None:
        on_status(StatusEvent(phase, message))
