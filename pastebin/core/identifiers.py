import random
import uuid

PASTE_ID_LENGTH = 12

WORDS = (
    "apple", "banana", "cherry", "dragon", "eagle", "falcon", "grape", "harbor",
    "island", "jungle", "kite", "lemon", "mango", "north", "ocean", "panda",
    "quartz", "river", "storm", "tiger", "unity", "violet", "whale", "xray",
    "yoga", "zebra", "anchor", "breeze", "castle", "dawn", "ember", "forest",
    "glacier", "hollow", "ivory", "jasper", "karma", "lunar", "marble", "nova",
    "orbit", "peak", "quest", "rain", "solar", "thunder", "ultra", "valley",
    "willow", "xenon", "yarn", "zenith", "azure", "blaze", "coral", "delta",
    "echo", "flame", "gold", "haven", "iron", "jade", "keen", "lotus",
    "meadow", "night", "olive", "pine", "quill", "rose", "sage", "thorn",
    "umbra", "vine", "wave", "xerox", "yield", "zephyr", "atlas", "bolt",
    "crest", "dusk", "edge", "frost", "glow", "haze", "ink", "jewel",
)

_rng = random.SystemRandom()


def new_paste_id() -> str:
    """12 hex chars of a random UUID, short enough for URLs."""
    return uuid.uuid4().hex[:PASTE_ID_LENGTH]


def new_memorable_password() -> str:
    """
        Two words joined by a hyphen, e.g. "ember-quartz".

        Used for generated paste passwords, invite codes and admin
        passwords. Words are drawn independently, so "rose-rose" is possible.
    """
    return f"{_rng.choice(WORDS)}-{_rng.choice(WORDS)}"
