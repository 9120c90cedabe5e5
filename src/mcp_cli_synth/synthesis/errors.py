"""Exceptions raised by the synthesis subsystem."""


class SynthesisError(Exception):
    """Base error for configuration synthesis."""
    pass


class UnknownFeatureError(SynthesisError, KeyError):
    """Feature name is not one of the known feature blocks."""
    pass


class UnsupportedVendorError(SynthesisError, ValueError):
    """Vendor has no entry in the dialect table."""
    pass
