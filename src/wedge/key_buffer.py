class BufferState:
    """
    Characters collected for the token currently being scanned.

    Owns the single pending finalize timer; rearm() is the only way to
    schedule one.
    """

    def __init__(self):
        self.chars = []
        self.last_time = None
        self.timer = None
        self.deadline = None

    def __len__(self):
        return len(self.chars)

    def append(self, char, now):
        """
        Adds a character accepted at time now.

        Args:
            char (str): The character.
            now (float): Acceptance time in seconds.
        """
        self.chars.append(char)
        self.last_time = now

    def gap_exceeds(self, now, interval):
        """
        Checks if more than interval seconds passed since the last character.

        Returns:
            bool: False when nothing has been accepted yet.
        """
        if self.last_time is None:
            return False
        return (now - self.last_time) > interval

    def last(self):
        return self.chars[-1] if self.chars else None

    def text(self):
        return "".join(self.chars)

    def rearm(self, scheduler, deadline, callback):
        """
        Cancels the pending timer, then schedules callback at deadline.

        A deadline already in the past runs on the next scheduler pass.
        """
        self.cancel_timer()
        self.timer = scheduler.call_later(deadline - scheduler.now(), callback)
        self.deadline = deadline

    def overdue(self, now):
        """Checks if the pending timer's deadline passed before time now."""
        return self.timer is not None and now > self.deadline

    def cancel_timer(self):
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        self.deadline = None

    def clear(self):
        """Drops all characters and the last timestamp; the timer is kept."""
        self.chars = []
        self.last_time = None

    def reset(self):
        """Drops characters and cancels the pending timer."""
        self.cancel_timer()
        self.clear()
