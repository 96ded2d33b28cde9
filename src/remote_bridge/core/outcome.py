"""
Call outcomes

A settled call is exactly one of Success(value) or Failure(error).
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    """Successful outcome carrying the call's value"""

    value: Any = None

    @property
    def is_success(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Failed outcome carrying the call's error"""

    error: BaseException

    @property
    def is_success(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise self.error


Outcome = Union[Success, Failure]


def is_outcome(obj: Any) -> bool:
    return isinstance(obj, (Success, Failure))
