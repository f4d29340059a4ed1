# Errors raised by the trading core. They're derived from the standard
# exceptions they most closely match so callers that only care about the
# broad category can catch ValueError/LookupError/RuntimeError

class InvalidArgumentException(ValueError):
    pass

class NotFoundException(LookupError):
    pass

class ConfigurationMissingException(RuntimeError):
    pass
