"""Domain-specific errors for iosctl."""


class IosctlError(Exception):
    """Base error for iosctl."""


class ConfigLoadError(IosctlError):
    """Raised when the project configuration file cannot be read."""


class ConfigValidationError(IosctlError):
    """Raised when the project configuration does not conform to schema or semantics."""


class DeviceDiscoveryError(IosctlError):
    """Raised when device or simulator enumeration tooling fails."""


class NoMatchingTargetError(IosctlError):
    """Raised when candidates exist but none clears the fuzzy-match threshold."""


class NoTargetAvailableError(IosctlError):
    """Raised when neither physical devices nor simulators are available."""


class PromptFailedError(IosctlError):
    """Raised when interactive input is unavailable or aborted."""


class SimulatorStartError(IosctlError):
    """Raised when a chosen simulator cannot be booted."""


class DocumentLoadError(IosctlError):
    """Raised when a required property-list document cannot be loaded or written."""


class SigningCredentialError(IosctlError):
    """Raised on malformed signing certificate or provisioning profile material."""
