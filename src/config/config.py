import os


class Config:
    """
    Configuration class for environment variables and default settings.
    """

    # Probe-wide defaults, overridable per probe and per target
    PROBE_PINGS = int(os.environ.get("PROBE_PINGS", "20"))
    PROBE_TIMEOUT = float(os.environ.get("PROBE_TIMEOUT", "5"))

    # Added on top of pings * timeout so the probe's own per-ping timeout fires first
    TIMEOUT_MARGIN = float(os.environ.get("TIMEOUT_MARGIN", "1"))

    # Maximum number of targets probed at the same time
    CONCURRENCY_LIMIT = int(os.environ.get("CONCURRENCY_LIMIT", "5"))

    # "process" runs each target in its own OS process, "thread" in a worker thread
    WORKER_MODE = os.environ.get("WORKER_MODE", "process")
    # None keeps the platform default (fork, forkserver or spawn)
    PROCESS_START_METHOD = os.environ.get("PROCESS_START_METHOD") or None
    # Time between SIGTERM and SIGKILL for a worker that overran its budget
    KILL_GRACE_SECONDS = float(os.environ.get("KILL_GRACE_SECONDS", "1"))

    # Sweep scheduling: one sweep every SWEEP_STEP seconds, starting at
    # SWEEP_OFFSET (fraction of the step) past each step boundary
    SWEEP_STEP = float(os.environ.get("SWEEP_STEP", "300"))
    SWEEP_OFFSET = float(os.environ.get("SWEEP_OFFSET", "0.5"))
