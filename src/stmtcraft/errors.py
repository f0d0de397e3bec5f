"""Exception taxonomy for statement rendering and execution.

Every failure is raised from the render call that detects it. When a render
raises, whatever the buffer accumulated so far is invalid and must be dropped.
"""

from __future__ import annotations


class StmtcraftError(Exception):
    """Base class for all stmtcraft errors."""

    code = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# -- structural ---------------------------------------------------------------


class StructuralError(StmtcraftError):
    """A statement is missing a part it cannot be rendered without."""

    code = "structural_error"


class MissingFromClause(StructuralError):
    code = "missing_from"

    def __init__(self, dialect: str) -> None:
        super().__init__(f"SELECT has no FROM source and dialect '{dialect}' requires one")
        self.dialect = dialect


class MissingTable(StructuralError):
    code = "missing_table"

    def __init__(self, statement: str) -> None:
        super().__init__(f"{statement} requires a table")
        self.statement = statement


class NoAssignments(StructuralError):
    code = "no_assignments"

    def __init__(self, table: str) -> None:
        super().__init__(f"UPDATE of '{table}' has no assignments")
        self.table = table


class MissingMembers(StructuralError):
    code = "missing_members"

    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind} has no member queries")
        self.kind = kind


class MissingAlias(StructuralError):
    """A subquery used as a source must be aliased."""

    code = "missing_alias"

    def __init__(self, context: str) -> None:
        super().__init__(f"Subquery used as {context} source requires an alias")
        self.context = context


class MissingValues(StructuralError):
    code = "missing_values"

    def __init__(self, table: str) -> None:
        super().__init__(f"INSERT into '{table}' has no rows or SELECT source")
        self.table = table


class MissingConflictTarget(StructuralError):
    code = "missing_conflict_target"

    def __init__(self, dialect: str) -> None:
        super().__init__(f"Upsert on dialect '{dialect}' requires conflict target columns")
        self.dialect = dialect


# -- arguments ----------------------------------------------------------------


class ArgumentError(StmtcraftError):
    """A value or argument list cannot be used as given."""

    code = "argument_error"


class ArgumentCountMismatch(ArgumentError):
    code = "argument_count_mismatch"

    def __init__(self, expected: int, got: int, context: str = "placeholders") -> None:
        super().__init__(f"Expected {expected} values for {context}, got {got}")
        self.expected = expected
        self.got = got


class UnsupportedType(ArgumentError):
    code = "unsupported_type"

    def __init__(self, value: object, reason: str | None = None) -> None:
        msg = f"Cannot render value of type '{type(value).__name__}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.value_type = type(value)


# -- dialect capabilities -----------------------------------------------------


class DialectCapabilityError(StmtcraftError):
    """The active dialect cannot express the requested feature."""

    code = "dialect_capability_error"


class UnsupportedFeature(DialectCapabilityError):
    code = "unsupported_feature"

    def __init__(self, feature: str, dialect: str) -> None:
        super().__init__(f"Dialect '{dialect}' does not support {feature}")
        self.feature = feature
        self.dialect = dialect


# -- escaping -----------------------------------------------------------------


class EscapeError(StmtcraftError):
    """A value cannot be rendered as a safe literal."""

    code = "escape_error"


# -- execution ----------------------------------------------------------------


class NotFoundError(StmtcraftError):
    """A single-row load returned no rows."""

    code = "not_found"

    def __init__(self, message: str = "No rows returned") -> None:
        super().__init__(message)


class TxDoneError(StmtcraftError):
    """A statement was issued on a transaction that already ended."""

    code = "tx_done"

    def __init__(self) -> None:
        super().__init__("Transaction has already been committed or rolled back")
