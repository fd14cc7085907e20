from enum import Enum


class ReadingStatus(str, Enum):
    WANT_TO_READ = "WANT_TO_READ"
    READING = "READING"
    FINISHED = "FINISHED"
    PAUSED = "PAUSED"
    DNF = "DNF"  # did not finish

    @property
    def stats_key(self) -> str:
        """Field name used for this status in the library statistics."""
        keys = {
            ReadingStatus.WANT_TO_READ: "want_to_read",
            ReadingStatus.READING: "currently_reading",
            ReadingStatus.FINISHED: "finished",
            ReadingStatus.PAUSED: "paused",
            ReadingStatus.DNF: "did_not_finish",
        }
        return keys[self]


class UserRole(str, Enum):
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"
