"""Result shapes shared by every public action."""

from pydantic import BaseModel


class ActionResult(BaseModel):
    """Outcome of a public action: ``success`` or a human-readable ``error``.

    ``fallback`` is True when the in-memory fallback store served the call, so the
    caller can warn that the data is not durable.
    """

    success: bool = False
    error: str | None = None
    fallback: bool = False

    @classmethod
    def ok(cls, **kwargs):
        return cls(success=True, **kwargs)

    @classmethod
    def fail(cls, error: str, **kwargs):
        return cls(success=False, error=error, **kwargs)
