"""Configuration from environment."""
import os


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    if raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


PORT = _int_env("PORT", 8080)

# When TESTING=true, use test DB URL so tests never touch production.
if os.environ.get("TESTING") == "true":
    DATABASE_URL = os.environ.get("TESTING_DATABASE_URL", "sqlite:///:memory:")
else:
    DATABASE_URL = os.environ.get(
        "DATABASE_URL",
        "sqlite:///./fleet.db",
    )

# "memory" keeps vehicles and jobs in process; "sql" persists them through SQLAlchemy.
STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "memory")

# Job service
PENDING_JOB_INTERVAL_S = _float_env("PENDING_JOB_INTERVAL_S", 5.0)
DEMO_MAX_ACTIVE_JOBS = _int_env("DEMO_MAX_ACTIVE_JOBS", 25)
DEMO_REGION = os.environ.get("DEMO_REGION", "us-west-2")

# Vehicle simulator
FLEET_SERVICE_URL = os.environ.get("FLEET_SERVICE_URL", "http://localhost:8080/api")
JOB_SERVICE_URL = os.environ.get("JOB_SERVICE_URL", "http://localhost:8080/api")
REGION = os.environ.get("REGION", "us-west-2")
VEHICLE_COUNT = _int_env("VEHICLE_COUNT", 1)
TICK_INTERVAL_S = _float_env("TICK_INTERVAL_S", 2.0)
# Degrees per tick (~35 km/h city driving at the default 2 s tick).
DEMO_SPEED = _float_env("DEMO_SPEED", 0.00035)
STARTUP_DELAY_S = _float_env("STARTUP_DELAY_S", 0.0)

# External routing (OSRM-compatible). Empty means straight-line routes only.
ROUTING_URL = os.environ.get("ROUTING_URL", "")

# Telemetry sink. Empty means records are only logged.
TELEMETRY_URL = os.environ.get("TELEMETRY_URL", "")
