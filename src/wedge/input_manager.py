import logging
import threading
import select
import time
import queue
import evdev

from .events import Phase, RawKeyEvent
from .key_source import KeySource
from . import keymap

logger = logging.getLogger(__name__)

# evdev EV_KEY values
_KEY_UP = 0
_KEY_DOWN = 1


class EvdevKeySource(KeySource):
    """
    Reads keyboard events from /dev/input and hands them to handlers.

    A background thread reads the devices into a queue. Handlers run only
    when the host loop calls pump(), on the host loop's thread.

    Args:
        device_filter (str, optional): Only use keyboards whose name
            contains this text (case-insensitive).
    """

    def __init__(self, device_filter=None):
        super().__init__()
        self.device_filter = device_filter
        self.devices = []
        self.running = False
        self.thread = None
        self.event_queue = queue.Queue()
        self._shift_down = set()

    def find_devices(self):
        """
        Scans /dev/input/event* for keyboards.
        """
        self.devices = []

        try:
            path_list = evdev.list_devices()
        except PermissionError:
            logger.error(
                "No permission for /dev/input/. "
                "Run as root or as a member of the 'input' group."
            )
            return

        for path in path_list:
            try:
                dev = evdev.InputDevice(path)
                caps = dev.capabilities()
            except (PermissionError, OSError) as e:
                logger.warning(f"Could not open device {path}: {e}")
                continue

            # Check for KEY_A to identify real keyboards
            keys = caps.get(evdev.ecodes.EV_KEY, [])
            if evdev.ecodes.KEY_A not in keys:
                dev.close()
                continue

            if (self.device_filter
                    and self.device_filter.lower() not in dev.name.lower()):
                logger.debug(f"Skipping keyboard: {dev.name} ({dev.path})")
                dev.close()
                continue

            self.devices.append(dev)
            logger.debug(f"Keyboard found: {dev.name} ({dev.path})")

        logger.info(f"Found {len(self.devices)} keyboard(s).")

    def start(self):
        """
        Starts the reader thread.

        Returns:
            bool: False if no keyboard could be found.
        """
        if not self.devices:
            self.find_devices()

        if not self.devices:
            logger.error("No keyboard devices found.")
            return False

        self.running = True
        self.thread = threading.Thread(target=self._loop, daemon=True)
        self.thread.start()
        logger.info("Keyboard listener started.")
        return True

    def stop(self):
        """
        Stops the reader thread and closes devices.
        """
        self.running = False
        if self.thread:
            self.thread.join(timeout=1.0)
            self.thread = None

        for dev in self.devices:
            try:
                dev.close()
            except OSError as e:
                logger.debug(f"Error closing {dev.path}: {e}")
        self.devices = []
        logger.info("Keyboard listener stopped.")

    def pump(self):
        """
        Dispatches all queued events to the handlers on the calling thread.

        Returns:
            int: Number of events dispatched.
        """
        count = 0
        while True:
            try:
                event = self.event_queue.get_nowait()
            except queue.Empty:
                return count
            self.dispatch(event)
            count += 1

    def _loop(self):
        """
        Main loop that reads events from devices.
        """
        while self.running:
            try:
                r, _, _ = select.select(self.devices, [], [], 0.5)

                for dev in r:
                    for event in dev.read():
                        self._handle_event(dev, event)

            except Exception as e:
                if self.running:
                    logger.error(f"Error in input loop: {e}")
                    time.sleep(1)

    def _handle_event(self, dev, event):
        """
        Translates a single evdev event into a queued RawKeyEvent.
        """
        if event.type != evdev.ecodes.EV_KEY:
            return
        # Autorepeat (value 2) is not a physical transition
        if event.value not in (_KEY_UP, _KEY_DOWN):
            return

        key_name = evdev.ecodes.KEY.get(event.code, f"UNK_{event.code}")
        if isinstance(key_name, (list, tuple)):
            key_name = key_name[0]

        if keymap.is_shift(key_name):
            if event.value == _KEY_DOWN:
                self._shift_down.add(key_name)
            else:
                self._shift_down.discard(key_name)

        key_id, char = keymap.translate(
            key_name, event.code, shifted=bool(self._shift_down)
        )
        phase = Phase.DOWN if event.value == _KEY_DOWN else Phase.UP
        self.event_queue.put(
            RawKeyEvent(key_id, phase, char, to_monotonic(event.timestamp()))
        )


def to_monotonic(wall_time):
    """
    Converts an evdev wall clock timestamp to time.monotonic() seconds.

    Key events are stamped by the kernel when they happen, so gaps between
    characters do not depend on how often the host loop polls.
    """
    return wall_time - time.time() + time.monotonic()
