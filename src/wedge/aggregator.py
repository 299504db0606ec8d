"""
Turns a raw keyboard event stream into discrete barcode tokens.
"""
import logging

from .events import MAX_PRINTABLE_KEY_ID, Phase
from .key_buffer import BufferState
from .policies import POLICIES, CountThresholdPolicy, TerminatorCharPolicy

logger = logging.getLogger(__name__)


class AggregatorConfig:
    """
    Immutable settings for a KeystrokeAggregator.

    Args:
        buffer_ms (int): Max quiet time in ms between characters of one scan.
        use_key_down (bool): Read characters from key presses instead of
            releases.
        termination (str): 'count' or 'terminator'.
        min_length (int): Shortest token reported by the count policy.
        terminator (str): End-of-scan character for the terminator policy.

    Raises:
        ValueError: If any value is out of range.
    """

    __slots__ = ("buffer_ms", "use_key_down", "termination", "min_length",
                 "terminator")

    def __init__(self, buffer_ms=100, use_key_down=False, termination="count",
                 min_length=4, terminator="m"):
        if buffer_ms < 0:
            raise ValueError("buffer_ms must be non-negative")
        if termination not in POLICIES:
            raise ValueError(
                f"unknown termination {termination!r}, "
                f"expected one of {sorted(POLICIES)}"
            )
        if min_length < 1:
            raise ValueError("min_length must be at least 1")
        if not isinstance(terminator, str) or len(terminator) != 1:
            raise ValueError("terminator must be a single character")
        object.__setattr__(self, "buffer_ms", buffer_ms)
        object.__setattr__(self, "use_key_down", bool(use_key_down))
        object.__setattr__(self, "termination", termination)
        object.__setattr__(self, "min_length", min_length)
        object.__setattr__(self, "terminator", terminator)

    def __setattr__(self, name, value):
        raise AttributeError("AggregatorConfig is immutable")

    def __eq__(self, other):
        if not isinstance(other, AggregatorConfig):
            return NotImplemented
        return all(getattr(self, k) == getattr(other, k) for k in self.__slots__)

    def __repr__(self):
        fields = ", ".join(f"{k}={getattr(self, k)!r}" for k in self.__slots__)
        return f"AggregatorConfig({fields})"

    @property
    def window(self):
        """The buffer window in seconds."""
        return self.buffer_ms / 1000.0

    @classmethod
    def from_dict(cls, values):
        """Builds a config from a settings dict, ignoring unrelated keys."""
        kwargs = {k: values[k] for k in cls.__slots__ if k in values}
        return cls(**kwargs)

    def make_policy(self):
        if self.termination == TerminatorCharPolicy.name:
            return TerminatorCharPolicy(self.terminator)
        return CountThresholdPolicy(self.min_length)


class KeystrokeAggregator:
    """
    Groups rapid keystrokes from a scanner into a single token callback.

    The aggregator taps a KeySource without consuming its events, so other
    handlers on the same source keep receiving every keystroke.

    Args:
        source (KeySource): Where raw key events come from.
        scheduler (PollingScheduler): Runs the finalize timer. Must be
            driven from the same thread that dispatches key events.
        config (AggregatorConfig, optional): Defaults to AggregatorConfig().
    """

    def __init__(self, source, scheduler, config=None):
        self.source = source
        self.scheduler = scheduler
        self.config = config or AggregatorConfig()
        self.policy = self.config.make_policy()
        self.state = BufferState()
        self._on_token = None
        self.running = False

    def start(self, on_token):
        """
        Begins listening for key events.

        Args:
            on_token (callable): Called with each completed token string.
        """
        self._on_token = on_token
        self.state = BufferState()
        self.running = True
        self.source.add_handler(self._handle_key_event)
        logger.debug(
            "Aggregator started (%s policy, %d ms window)",
            self.policy.name, self.config.buffer_ms,
        )

    def stop(self):
        """
        Stops listening and discards any partial scan.

        No token callback fires after this returns.
        """
        if self.running:
            self.source.remove_handler(self._handle_key_event)
        self.running = False
        self.state.reset()
        self._on_token = None
        logger.debug("Aggregator stopped")

    def _handle_key_event(self, event):
        # Never consumes the event.
        if event.logical_key_id > MAX_PRINTABLE_KEY_ID:
            return False
        wanted = Phase.DOWN if self.config.use_key_down else Phase.UP
        if event.phase is not wanted:
            return False
        if not event.character:
            return False
        when = event.timestamp
        if when is None:
            when = self.scheduler.now()
        self._accept(event.character, when)
        return False

    def _accept(self, char, when):
        if self.state.overdue(when):
            # The previous scan went quiet before this character arrived,
            # but the host loop has not run its timer yet.
            self.state.cancel_timer()
            self._finalize()
        self.policy.accept(self.state, char, when, self.config.window)
        self.state.rearm(
            self.scheduler, when + self.config.window, self._finalize
        )

    def _finalize(self):
        if not self.running:
            return
        self.state.timer = None
        self.state.deadline = None
        token = self.policy.finalize(self.state)
        if token is None:
            return
        logger.debug("Barcode scanned: %r", token)
        try:
            self._on_token(token)
        except Exception:
            logger.exception("Barcode callback failed")
