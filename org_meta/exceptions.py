"""
Custom exception hierarchy for org-meta.

Two kinds of failure exist while reading ``#+KEY:`` lines:

- Soft failures (``ParseFailure``) mean "this alternative does not match,
  try the next one".  They are raised by individual parsers and always
  caught by a combinator or by the document reader; callers of the public
  API never see them.
- Hard failures (everything else) signal misuse or invalid configuration
  and propagate to the caller.
"""


class OrgMetaError(Exception):
    """Base exception for all org-meta errors."""


class ParseFailure(OrgMetaError):
    """Raised when a parser alternative does not match the input.

    Carries the cursor offset where the alternative gave up, which is
    only used for debug logging.
    """

    def __init__(self, message: str = "no match", position: int | None = None) -> None:
        self.position = position
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)


class ParsingError(OrgMetaError):
    """Raised when a parser is invoked on input it is never meant to see.

    For example, calling ``meta_line`` at a position that does not start
    with ``#+``, or handing a YAML file to ``org_meta.open()``.
    """


class ConfigValidationError(OrgMetaError):
    """Raised when a reader configuration fails validation.

    This can happen if:
    - The YAML config file is empty.
    - ``default_todo`` does not resolve to a TODO sequence.
    """
