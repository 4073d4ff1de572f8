"""Exceptions raised by the tax calculators."""


class TaxEngineError(Exception):
    """Base class for calculator errors."""


class InvalidInput(TaxEngineError, ValueError):
    """A caller supplied a value the calculators cannot accept.

    Negative money, malformed numeric text, an unknown tax year, region or
    vehicle all end up here. Values are never corrected silently.
    """


class ConfigurationError(TaxEngineError):
    """A rate table or configuration file is malformed.

    Raised while tables are built at import or startup, not during a
    calculation.
    """
