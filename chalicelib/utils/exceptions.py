__all__ = ["NotAuthorizedException", "AccessDenied", "RecordNotFound", "RecordAlreadyExists",
           "NumberOfRetriesExceeded", "ValidationException"]


class NotAuthorizedException(Exception):
    pass


# Generic Exceptions
class AccessDenied(Exception):
    pass


# DynamoDB exceptions
class RecordNotFound(Exception):
    pass


class RecordAlreadyExists(Exception):
    pass


# DB Performance Exception
class NumberOfRetriesExceeded(Exception):
    pass


# Validations exceptions
class ValidationException(Exception):
    LEVEL = 'warning'
