"""Exception types shared across the Lineage package."""


class LineageError(Exception):
    """Base class for all Lineage errors."""


class FormatError(LineageError):
    """A session document is missing its header block or structured block."""


class YamlError(LineageError):
    """A header or structured block is not well-formed YAML.

    Attributes:
        label: Which block failed ("frontmatter" or "lineage-session").
        line: 0-based line of the failure within the block.
    """

    def __init__(self, message: str, label: str = "", line: int = 0):
        super().__init__(message)
        self.label = label
        self.line = line


class SchemaError(LineageError):
    """A session value has the wrong type or shape.

    Attributes:
        field_path: Offending field, e.g. ``assertions[0].participants[1].person_ref``.
    """

    def __init__(self, message: str, field_path: str):
        super().__init__(message)
        self.field_path = field_path


class StoreError(LineageError):
    """The record store failed to read or write a record."""


class ValidationBlockedError(LineageError):
    """A session has error-level validation issues and cannot be saved or projected."""

    def __init__(self, message: str, issues: list | None = None):
        super().__init__(message)
        self.issues = issues or []


class PersonInUseError(LineageError):
    """A session person cannot be removed while assertions reference it."""

    def __init__(self, person_id: str, assertion_ids: list[str]):
        super().__init__(
            f"Person {person_id} is referenced by assertions: {', '.join(assertion_ids)}"
        )
        self.person_id = person_id
        self.assertion_ids = assertion_ids
