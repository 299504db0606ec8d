"""
Raw keyboard events as delivered by a key source.
"""
import enum
from typing import NamedTuple, Optional

# Ids above this value belong to modifier, function and navigation keys.
MAX_PRINTABLE_KEY_ID = 255


class Phase(enum.Enum):
    DOWN = "down"
    UP = "up"


class RawKeyEvent(NamedTuple):
    """
    A single physical key transition.

    Attributes:
        logical_key_id: Layout-resolved key identity. Printable keys use the
            code point of their unshifted character.
        phase: Phase.DOWN on press, Phase.UP on release.
        character: The character produced by this transition, if any.
        timestamp: When the transition happened, on the scheduler's clock.
            None means "now", i.e. the time it is dispatched.
    """
    logical_key_id: int
    phase: Phase
    character: Optional[str] = None
    timestamp: Optional[float] = None
