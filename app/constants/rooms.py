"""Room kinds and the moods users can check in with."""

from enum import StrEnum


class RoomKind(StrEnum):
    MOOD = "mood"
    GENERAL = "general"
    DIRECT = "direct"


class Mood(StrEnum):
    HAPPY = "happy"
    STRESSED = "stressed"
    LONELY = "lonely"
    EXCITED = "excited"
    TIRED = "tired"


GENERAL_ROOM_KEY = "general"
ATTACHMENT_PLACEHOLDER_BODY = "(Image)"
DEFAULT_REPORT_REASON = "Inappropriate content"
