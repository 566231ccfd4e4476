from enum import Enum
from typing import Optional, Union


class StatusLabel(str, Enum):
    SUCCESS = "Success"
    PENDING = "Pending"
    REJECTED = "Rejected"


class RequestAction(str, Enum):
    APPROVED = "A"
    PENDING = "P"
    REJECTED = "R"


_LABELS = {
    RequestAction.APPROVED.value: StatusLabel.SUCCESS,
    RequestAction.PENDING.value: StatusLabel.PENDING,
    RequestAction.REJECTED.value: StatusLabel.REJECTED,
}


def classify(code: Optional[str]) -> Union[StatusLabel, str, None]:
    """Map a one-letter request action code to its display label.

    Unknown codes are returned unchanged so new backend states still render.
    """
    if isinstance(code, str):
        return _LABELS.get(code, code)
    return code
