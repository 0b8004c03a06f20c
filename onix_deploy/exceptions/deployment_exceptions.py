from typing import Sequence


class DeploymentError(Exception):
    """Base class for deployment planning and provisioning errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(DeploymentError):
    """Raised when required configuration is missing or invalid."""


class UnknownTargetError(DeploymentError):
    """Raised when the requested deployment target is not recognised."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(
            f"Unknown deployment target {target!r}. "
            "Expected one of: sandbox, registry, gateway, bap, bpp."
        )


class PlanOrderError(DeploymentError):
    """Raised when a plan places a step before the steps it depends on."""


class SubnetAvailabilityError(DeploymentError):
    """Raised when a required subnet tier has no subnets."""

    def __init__(self, tier: str, network: str) -> None:
        self.tier = tier
        self.network = network
        super().__init__(f"No {tier} subnets available in network {network}.")


class ProvisioningError(DeploymentError):
    """Raised when a construction step fails.

    Resources created by the steps in ``completed`` are not rolled back and
    stay live.
    """

    def __init__(self, step: str, cause: BaseException, completed: Sequence[str] = ()) -> None:
        self.step = step
        self.cause = cause
        self.completed = tuple(completed)
        message = f"Step {step} failed: {cause}"
        if self.completed:
            message += f" (left in place: {', '.join(self.completed)})"
        super().__init__(message)
