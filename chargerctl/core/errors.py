"""Domain-specific errors for chargerctl."""


class ChargerctlError(Exception):
    """Base error for chargerctl."""


class ConfigError(ChargerctlError):
    """Raised when the configuration file is unreadable or invalid."""


class AdapterUnavailableError(ChargerctlError):
    """Raised when no usable Bluetooth adapter can start a scan."""


class DeviceNotFoundError(ChargerctlError):
    """Raised when no scanned peripheral matches the target serial number."""


class ConnectionFailedError(ChargerctlError):
    """Raised on BLE connect failures."""


class StatusRequestFailedError(ChargerctlError):
    """Raised when the charger status request cannot be completed."""


class MalformedResponseError(ChargerctlError):
    """Raised when the charger answers with a body that cannot be parsed."""
