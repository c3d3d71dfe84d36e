class PrefixMatchError(Exception):
    pass


class UnknownStrategyError(PrefixMatchError, ValueError):
    pass


class PrefixSourceError(PrefixMatchError, OSError):
    pass


class ConfigurationError(PrefixMatchError, ValueError):
    pass


class BatchMatchError(PrefixMatchError, RuntimeError):
    """ Raised once for the whole batch when any of its lookups failed """


class ServiceClosedError(PrefixMatchError, RuntimeError):
    pass


class ThreadPoolException(RuntimeError):
    pass


__all__ = (
    "BatchMatchError",
    "ConfigurationError",
    "PrefixMatchError",
    "PrefixSourceError",
    "ServiceClosedError",
    "ThreadPoolException",
    "UnknownStrategyError",
)
