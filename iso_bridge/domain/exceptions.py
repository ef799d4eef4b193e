"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ParseError(DomainException):
    """Legacy input could not be turned into a canonical message"""

    pass


class MissingFieldError(ParseError):
    """Required tag, record or element is absent"""

    pass


class InvalidFormatError(ParseError):
    """Field is present but does not match its expected shape"""

    pass
