class AuthFailure(Exception):
    def __init__(self, provider: str, message: str, permanent: bool = False):
        self.provider = provider
        self.message = message
        self.permanent = permanent
        super().__init__(f"{provider}: {message}")


class ProviderError(Exception):
    def __init__(self, provider: str, message: str, status_code: int | None = None):
        self.provider = provider
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider}: {message}")


class RateLimitError(ProviderError):
    def __init__(self, provider: str):
        super().__init__(provider, "rate limit exceeded", status_code=429)


class ProviderAuthError(ProviderError):
    def __init__(self, provider: str, message: str):
        super().__init__(provider, f"authentication failed: {message}")


class CatalogError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
