class RoutineError(Exception):
    pass


class NotFoundError(RoutineError):
    pass


class ValidationError(RoutineError):
    pass


class LimitExceededError(RoutineError):
    pass


class InvalidReorderError(RoutineError):
    pass


class StorageError(RoutineError):
    def __init__(self, message: str, operation: str | None = None):
        self.operation = operation
        super().__init__(message)


class TemplateNotFoundError(NotFoundError):
    pass


class AmbiguousError(RoutineError):
    def __init__(self, ref: str, count: int = 0, sample: list[str] | None = None):
        self.ref = ref
        self.count = count
        self.sample = sample or []
        count_note = f" ({count})" if count else ""
        note = f": {', '.join(self.sample)}" if self.sample else ""
        super().__init__(f"ambiguous ref '{ref}' matches multiple habits{count_note}{note}")
