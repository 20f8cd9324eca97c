class PricingException(Exception):
    pass


class NetworkFailure(PricingException):
    pass


class UpstreamError(PricingException):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ValidationFailure(PricingException):
    pass


class ConfigurationError(PricingException):
    pass
