class LatexSyncError(Exception):
    """Base exception for all latexsync errors."""
    pass


class RenderBackendError(LatexSyncError):
    """Raised inside the render package when a backend fails to produce output."""

    def __init__(self, engine: str, message: str):
        super().__init__(message)
        self.engine = engine
        self.message = message


class EngineLoadTimeoutError(RenderBackendError):
    """Raised when a backend is still not loaded after the wait ceiling."""

    def __init__(self, engine: str, timeout_ms: int):
        super().__init__(engine, f"{engine} failed to load within {timeout_ms} ms")
        self.timeout_ms = timeout_ms
