"""Exception hierarchy for caller misuse.

Music-theory violations are never raised; they travel inside result objects.
Everything here signals malformed input from the calling code.
"""


class HarmonyCheckError(Exception):
    """Base class for all harmonycheck errors."""


class InvalidPitchError(HarmonyCheckError, ValueError):
    """A pitch spelling is not in the pitch-class table."""

    def __init__(self, pitch: str) -> None:
        super().__init__(f"Invalid pitch spelling: '{pitch}'")
        self.pitch = pitch


class ChordShapeError(HarmonyCheckError, ValueError):
    """A chord does not have the note count an operation requires."""


class VoiceOrderError(HarmonyCheckError, ValueError):
    """Voices were passed in the wrong register order."""


class ExerciseDataError(HarmonyCheckError, ValueError):
    """Exercise or progression data is malformed."""


class LevelLockedError(HarmonyCheckError):
    """A submission was made for a level that has not been unlocked yet."""

    def __init__(self, level_id: str) -> None:
        super().__init__(f"Level '{level_id}' is locked")
        self.level_id = level_id
