# errors.py


class ConfigError(Exception):
    """Required setting missing or not usable."""


class StoreUnavailable(Exception):
    """The snooze database could not be reached."""


class DataUnavailable(Exception):
    """The weather source returned no usable precipitation data."""


class DeliveryError(Exception):
    """A notification could not be confirmed as delivered."""
