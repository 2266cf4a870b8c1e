class BookshelfError(Exception):
    """Base exception for bookshelf errors."""

    pass


class ConfigError(BookshelfError):
    pass


class MigrationError(BookshelfError):
    def __init__(self, filename: str, details: str):
        self.filename = filename
        super().__init__(f"Migration {filename} failed: {details}")


class MigrationChecksumError(MigrationError):
    def __init__(self, filename: str):
        super().__init__(filename, "file changed after it was applied")
