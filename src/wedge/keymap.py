"""
Maps Linux key names (e.g. 'KEY_A') to logical key ids and characters.

Uses a US keyboard layout, which is what most scanners emulate by default.
"""

# Non-printable keys are placed above this offset so that their ids never
# collide with the printable range.
UNPRINTABLE_PLANE = 0x100000000

# key name -> (unshifted, shifted)
_PRINTABLE = {
    "KEY_SPACE": (" ", " "),
    "KEY_1": ("1", "!"),
    "KEY_2": ("2", "@"),
    "KEY_3": ("3", "#"),
    "KEY_4": ("4", "$"),
    "KEY_5": ("5", "%"),
    "KEY_6": ("6", "^"),
    "KEY_7": ("7", "&"),
    "KEY_8": ("8", "*"),
    "KEY_9": ("9", "("),
    "KEY_0": ("0", ")"),
    "KEY_MINUS": ("-", "_"),
    "KEY_EQUAL": ("=", "+"),
    "KEY_LEFTBRACE": ("[", "{"),
    "KEY_RIGHTBRACE": ("]", "}"),
    "KEY_BACKSLASH": ("\\", "|"),
    "KEY_SEMICOLON": (";", ":"),
    "KEY_APOSTROPHE": ("'", '"'),
    "KEY_GRAVE": ("`", "~"),
    "KEY_COMMA": (",", "<"),
    "KEY_DOT": (".", ">"),
    "KEY_SLASH": ("/", "?"),
    "KEY_KP0": ("0", "0"),
    "KEY_KP1": ("1", "1"),
    "KEY_KP2": ("2", "2"),
    "KEY_KP3": ("3", "3"),
    "KEY_KP4": ("4", "4"),
    "KEY_KP5": ("5", "5"),
    "KEY_KP6": ("6", "6"),
    "KEY_KP7": ("7", "7"),
    "KEY_KP8": ("8", "8"),
    "KEY_KP9": ("9", "9"),
    "KEY_KPMINUS": ("-", "-"),
    "KEY_KPPLUS": ("+", "+"),
    "KEY_KPASTERISK": ("*", "*"),
    "KEY_KPSLASH": ("/", "/"),
    "KEY_KPDOT": (".", "."),
}
for _letter in "ABCDEFGHIJKLMNOPQRSTUVWXYZ":
    _PRINTABLE["KEY_" + _letter] = (_letter.lower(), _letter)

# Control keys that still produce a character but are not printable.
_CONTROL = {
    "KEY_ENTER": "\n",
    "KEY_KPENTER": "\n",
    "KEY_TAB": "\t",
}

SHIFT_KEYS = frozenset({"KEY_LEFTSHIFT", "KEY_RIGHTSHIFT"})


def translate(key_name, code=0, shifted=False):
    """
    Resolves a key to its logical id and produced character.

    Args:
        key_name (str): Linux key name such as 'KEY_A'.
        code (int): Raw evdev key code, used for non-printable ids.
        shifted (bool): Whether a shift key is currently held.

    Returns:
        tuple: (logical_key_id, character or None)
    """
    pair = _PRINTABLE.get(key_name)
    if pair is not None:
        unshifted, upper = pair
        return ord(unshifted), upper if shifted else unshifted
    return UNPRINTABLE_PLANE + code, _CONTROL.get(key_name)


def is_shift(key_name):
    return key_name in SHIFT_KEYS
