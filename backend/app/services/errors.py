"""
Domain errors raised by the service layer.

Routers translate these into HTTP responses; the import engine uses them to
tell fatal problems apart from row-level ones.
"""


class LibroError(Exception):
    """Base class for service errors."""


class NotAuthenticatedError(LibroError):
    """No authenticated session was supplied."""


class ImportSchemaError(LibroError):
    """The CSV file cannot be imported at all (fatal for the whole import)."""


class ImportRowError(LibroError):
    """A single CSV row is invalid; the import continues with the next row."""


class CatalogLookupError(LibroError):
    """The external catalog API could not be reached or answered with an error."""


class DuplicateReviewError(LibroError):
    """The user already reviewed this book."""


class BookAlreadyExistsError(LibroError):
    """A book with the same ISBN is already cataloged."""


class BookNotFoundError(LibroError):
    """No book (or collection entry) matches the given id."""


class AlreadyInCollectionError(LibroError):
    """The book is already in the user's collection."""
