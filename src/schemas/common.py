"""Shared field types for request schemas."""

from typing import Annotated, Optional

from pydantic import BeforeValidator, StringConstraints


def _blank_to_none(value):
    # Forms send "" for untouched optional inputs
    if isinstance(value, str) and not value.strip():
        return None
    return value


def optional_text(min_length: Optional[int] = None, max_length: Optional[int] = None):
    """Optional trimmed string; blank input becomes ``None``."""
    return Annotated[
        Optional[
            Annotated[
                str,
                StringConstraints(
                    strip_whitespace=True, min_length=min_length, max_length=max_length
                ),
            ]
        ],
        BeforeValidator(_blank_to_none),
    ]


def required_text(min_length: int = 1, max_length: Optional[int] = None):
    return Annotated[
        str,
        StringConstraints(strip_whitespace=True, min_length=min_length, max_length=max_length),
    ]


PhoneNumber = Annotated[
    Optional[Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^[0-9]{10}$")]],
    BeforeValidator(_blank_to_none),
]
