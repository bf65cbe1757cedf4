class RecordingsError(Exception):
    pass


class NotFoundError(RecordingsError):
    pass


class StorageError(RecordingsError):
    pass


class BadRequestError(RecordingsError):
    pass


class RangeNotSatisfiableError(BadRequestError):
    def __init__(self, message: str, total_size: int):
        super().__init__(message)
        self.total_size = total_size
