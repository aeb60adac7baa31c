class DaylistError(Exception):
    pass


class StorageError(DaylistError):
    pass


class ValidationError(DaylistError):
    def __init__(self, violations: list[str]):
        self.violations = violations
        count = len(violations)
        noun = "problem" if count == 1 else "problems"
        super().__init__(f"invalid import data ({count} {noun}): {'; '.join(violations[:3])}")
