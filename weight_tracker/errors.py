class WeightTrackerError(Exception):
    """Base class for errors raised by the data layer"""
    status_code = 500


class ValidationError(WeightTrackerError):
    """Bad input shape or range"""
    status_code = 400


class NotFoundError(WeightTrackerError):
    """The target of an operation does not exist"""
    status_code = 404


class AuthError(WeightTrackerError):
    """Credential mismatch"""
    status_code = 400
