"""
Error taxonomy for panoconv.

Every failure the converter can hit lives at the I/O boundary (arguments,
decode, allocation, encode). Each error carries the process exit code the
CLI reports for it.
"""

from .config.defaults import (
    EXIT_USAGE_ERROR, EXIT_DECODE_ERROR,
    EXIT_ALLOCATION_ERROR, EXIT_ENCODE_ERROR
)


class ConversionError(RuntimeError):
    """Base class for fatal conversion errors"""

    exit_code = EXIT_USAGE_ERROR


class UsageError(ConversionError):
    """Wrong argument count or shape"""

    exit_code = EXIT_USAGE_ERROR


class DecodeError(ConversionError):
    """Source image unreadable, unsupported or corrupt"""

    exit_code = EXIT_DECODE_ERROR


class AllocationError(ConversionError):
    """Destination buffer could not be sized or allocated"""

    exit_code = EXIT_ALLOCATION_ERROR


class EncodeError(ConversionError):
    """Destination image could not be written"""

    exit_code = EXIT_ENCODE_ERROR
