from __future__ import annotations

from enum import Enum

"""TransferMethod enum for the FILE META registry.

The registry stores the transfer method either as a human readable label
(``Automatic`` / ``Manual`` / ``Not Available``) or as a compacted one letter
code (``A`` / ``M`` / ``N``). One enum member exists per meaning; the label and
the code are attributes of the member, and ``LABEL_TO_CODE`` is the explicit
mapping table used by the normalize pass.
"""

__all__ = [
    "TransferMethod",
    "LABEL_TO_CODE",
    "CODE_TO_LABEL",
    "is_known_value",
]


class TransferMethod(Enum):
    """How (or whether) an inbound file is expected to arrive.

    State transitions over one run:
    label → code (normalize pass) → ``Automatic`` label (scan pass, on match)
    """
    AUTOMATIC = ("Automatic", "A")
    MANUAL = ("Manual", "M")
    NOT_AVAILABLE = ("Not Available", "N")

    def __init__(self, label: str, code: str) -> None:
        self.label = label
        self.code = code

    @classmethod
    def from_value(cls, value: str) -> TransferMethod | None:
        """Resolve either a label or a code to its member (None if unknown)."""
        for member in cls:
            if value in (member.label, member.code):
                return member
        return None


LABEL_TO_CODE: dict[str, str] = {m.label: m.code for m in TransferMethod}
CODE_TO_LABEL: dict[str, str] = {m.code: m.label for m in TransferMethod}


def is_known_value(value: str) -> bool:
    return TransferMethod.from_value(value) is not None
