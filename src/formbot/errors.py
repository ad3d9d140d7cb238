from __future__ import annotations


class FormError(Exception):
    """Base class for everything the form core raises on purpose."""


class OutOfRange(FormError, IndexError):
    """An edit or capture call referenced a question/category/option/sub-question that does not exist.

    Always a caller bug: indices come from the current value, so this is never recovered.
    """

    def __init__(self, what: str, index: object, size: int | None = None) -> None:
        self.what = what
        self.index = index
        self.size = size
        if size is None:
            super().__init__(f"{what} {index!r} does not exist")
        else:
            super().__init__(f"{what} index {index!r} out of range (size={size})")


class ValidationError(FormError, ValueError):
    """Save attempted with a form the store refuses (blank title)."""


class NotFound(FormError, LookupError):
    def __init__(self, kind: str, ident: str) -> None:
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} not found: {ident}")


class TransportFailure(FormError):
    """The storage layer failed; nothing is retried."""

    def __init__(self, op: str, cause: BaseException | None = None) -> None:
        self.op = op
        self.cause = cause
        super().__init__(f"{op} failed: {cause}" if cause else f"{op} failed")
