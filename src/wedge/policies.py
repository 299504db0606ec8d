"""
Termination policies decide when buffered characters form a token.

Each policy has two hooks used by KeystrokeAggregator:
  - accept(state, char, now, window): called for every accepted character.
  - finalize(state): called when the quiet-period timer fires. Returns the
    token to emit, or None.
"""
import logging

logger = logging.getLogger(__name__)


class CountThresholdPolicy:
    """
    A quiet period ends the scan; short bursts are treated as typing noise.

    Args:
        min_length (int): Smallest token length that is reported.
    """

    name = "count"

    def __init__(self, min_length=4):
        if min_length < 1:
            raise ValueError("min_length must be at least 1")
        self.min_length = min_length

    def accept(self, state, char, now, window):
        if state.gap_exceeds(now, window):
            logger.debug("Gap exceeded, dropping %d buffered chars", len(state))
            state.clear()
        state.append(char, now)

    def finalize(self, state):
        token = state.text() if len(state) >= self.min_length else None
        if token is None and len(state):
            logger.debug("Discarding %d chars below threshold", len(state))
        state.clear()
        return token


class TerminatorCharPolicy:
    """
    A scan is complete when the buffer ends with the terminator character.

    The default terminator 'm' matches scanners whose line feed arrives
    as an 'm' keystroke on some platforms.

    Args:
        terminator (str): Single character marking the end of a scan.
    """

    name = "terminator"

    def __init__(self, terminator="m"):
        if not isinstance(terminator, str) or len(terminator) != 1:
            raise ValueError("terminator must be a single character")
        self.terminator = terminator

    def accept(self, state, char, now, window):
        state.append(char, now)

    def finalize(self, state):
        if state.last() != self.terminator:
            # Incomplete scan; wait for more characters.
            return None
        token = "".join(state.chars[:-1])
        state.clear()
        if not token:
            logger.debug("Discarding empty token")
            return None
        return token


POLICIES = {
    CountThresholdPolicy.name: CountThresholdPolicy,
    TerminatorCharPolicy.name: TerminatorCharPolicy,
}
