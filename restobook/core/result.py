from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Result:
    """Outcome of an operation: either data or an error message, never both."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    kind: Optional[str] = None

    @classmethod
    def ok(cls, data: Any) -> "Result":
        return cls(success=True, data=data)

    @classmethod
    def err(cls, error: str, kind: str = "error") -> "Result":
        return cls(success=False, error=error, kind=kind)

    def unwrap(self) -> Any:
        if not self.success:
            raise ValueError(self.error)
        return self.data

    def to_dict(self) -> dict:
        if self.success:
            return {"ok": self.data}
        return {"err": self.error}
