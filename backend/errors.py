"""Error taxonomy shared by storage, services, API and simulator clients."""


class FleetError(Exception):
    """Base class for fleet/job domain errors."""


class NotFoundError(FleetError):
    """Unknown vehicle or job id."""


class AlreadyExistsError(FleetError):
    """Create called with an id that is already stored."""


class NoVehicleAvailableError(FleetError):
    """Dispatch found no available vehicle with enough range."""


class InvalidStateError(FleetError):
    """Operation not allowed from the record's current status."""


class ServiceError(FleetError):
    """Peer service answered with an unexpected (non-404) status or body."""


class ServiceTimeoutError(FleetError, TimeoutError):
    """Peer service did not answer within the client timeout."""


class RegistrationError(FleetError):
    """Vehicle could not register with the fleet service after all retries."""


class RegistrationTimeoutError(RegistrationError, TimeoutError):
    """Registration deadline passed before a successful attempt."""
