class ForkPingError(Exception):
    """Base class for all errors raised by the probing framework."""


class ConfigError(ForkPingError):
    """A mandatory variable is missing or a target names an unknown probe."""


class InvalidConfig(ConfigError):
    """A ping count, timeout or other variable has a malformed value."""


class PingFailure(ForkPingError):
    """A single ping got no usable reply. Never surfaced past the worker."""


class WorkerFault(ForkPingError):
    """The worker crashed or exited abnormally before finishing its pings."""


class WorkerTimeout(ForkPingError):
    """The worker overran its timeout budget and was stopped."""


class WorkerSpawnError(ForkPingError):
    """The worker process or thread could not be started."""


class SchedulingError(ForkPingError):
    """The scheduler could not start any worker for the sweep."""
