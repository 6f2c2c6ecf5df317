from prometheus_client import Counter, Gauge, Histogram

WORKERS_IN_FLIGHT = Gauge(
    "forkping_workers_in_flight", "Number of probe workers currently running"
)
PING_LATENCY = Histogram(
    "forkping_ping_latency_seconds",
    "Latency of successful pings in seconds",
    ["probe"],
    buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
PINGS_LOST = Counter(
    "forkping_pings_lost", "Pings that produced no usable latency sample", ["probe"]
)
WORKER_TIMEOUTS = Counter(
    "forkping_worker_timeouts", "Workers stopped after overrunning their budget", ["probe"]
)
WORKER_FAULTS = Counter(
    "forkping_worker_faults",
    "Workers that crashed or pings that raised unexpected errors",
    ["probe"],
)
NO_DATA_TARGETS = Counter(
    "forkping_no_data_targets", "Targets skipped because their configuration was invalid", ["probe"]
)
SWEEP_DURATION = Histogram(
    "forkping_sweep_duration_seconds", "Wall-clock duration of full sweeps in seconds"
)
CALL_DURATION = Histogram(
    "forkping_call_duration_seconds", "Duration of profiled calls in seconds", ["function"]
)
