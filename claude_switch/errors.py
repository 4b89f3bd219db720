class ClaudeSwitchError(Exception):
    """Base class for every error the switcher reports to the user."""


class ConfigIOError(ClaudeSwitchError):
    pass


class ConfigParseError(ClaudeSwitchError):
    pass


class HomeDirectoryUnavailable(ClaudeSwitchError):
    def __init__(self, message: str = "Could not find home directory"):
        super().__init__(message)


class EmptyTokenError(ClaudeSwitchError):
    def __init__(self, message: str = "Token cannot be empty"):
        super().__init__(message)
