class StartupError(Exception):
    """A resource the server needs before serving could not be acquired."""

    def __init__(self, resource: str, message: str):
        super().__init__(message)
        self.resource = resource
        self.message = message
