# =============================================================================
# core/models/query.py - Query Descriptor
# =============================================================================
# Filter/sort/pagination parameters for a read (or for the row selection of
# an update/delete). Queries are immutable: every builder method returns a
# new Query, so a descriptor can be shared between calls safely.
#
# Usage:
#   query = (
#       Query()
#       .eq("published", True)
#       .order_by("created_at", descending=True)
#       .limit_to(10)
#   )
#   query.to_params()
#   # [("select", "*"), ("published", "eq.true"),
#   #  ("order", "created_at.desc"), ("limit", "10")]
# =============================================================================

from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field


class FilterOp(str, Enum):
    """Comparison operators understood by the REST data endpoint."""
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    LIKE = "like"
    ILIKE = "ilike"
    IS = "is"
    IN = "in"


class Filter(BaseModel):
    """A single `column <op> value` condition."""

    model_config = ConfigDict(frozen=True)

    column: str = Field(..., min_length=1)
    op: FilterOp
    value: Any = None

    def render(self) -> tuple[str, str]:
        if self.op == FilterOp.IN:
            items = ",".join(_format_list_item(v) for v in self.value)
            return self.column, f"in.({items})"
        return self.column, f"{self.op.value}.{_format_value(self.value)}"


class Order(BaseModel):
    """Sort key."""

    model_config = ConfigDict(frozen=True)

    column: str = Field(..., min_length=1)
    descending: bool = False

    def render(self) -> str:
        return f"{self.column}.{'desc' if self.descending else 'asc'}"


class Query(BaseModel):
    """
    Immutable query descriptor.

    Attributes:
        columns: Column list for the select clause ("*" for all)
        filters: Conditions, AND-ed together
        order: Sort keys, applied in sequence
        limit: Maximum rows to return (None = service default)
        offset: Rows to skip before returning
    """

    model_config = ConfigDict(frozen=True)

    columns: str = "*"
    filters: tuple[Filter, ...] = ()
    order: tuple[Order, ...] = ()
    limit: int | None = Field(default=None, ge=0)
    offset: int | None = Field(default=None, ge=0)

    # -------------------------------------------------------------------------
    # Builders
    # -------------------------------------------------------------------------

    def select(self, columns: str | Iterable[str]) -> "Query":
        if not isinstance(columns, str):
            columns = ",".join(columns)
        return self.model_copy(update={"columns": columns})

    def where(self, column: str, op: FilterOp | str, value: Any) -> "Query":
        condition = Filter(column=column, op=FilterOp(op), value=value)
        return self.model_copy(update={"filters": self.filters + (condition,)})

    def eq(self, column: str, value: Any) -> "Query":
        return self.where(column, FilterOp.EQ, value)

    def neq(self, column: str, value: Any) -> "Query":
        return self.where(column, FilterOp.NEQ, value)

    def gt(self, column: str, value: Any) -> "Query":
        return self.where(column, FilterOp.GT, value)

    def gte(self, column: str, value: Any) -> "Query":
        return self.where(column, FilterOp.GTE, value)

    def lt(self, column: str, value: Any) -> "Query":
        return self.where(column, FilterOp.LT, value)

    def lte(self, column: str, value: Any) -> "Query":
        return self.where(column, FilterOp.LTE, value)

    def like(self, column: str, pattern: str) -> "Query":
        return self.where(column, FilterOp.LIKE, pattern)

    def ilike(self, column: str, pattern: str) -> "Query":
        return self.where(column, FilterOp.ILIKE, pattern)

    def is_(self, column: str, value: bool | None) -> "Query":
        return self.where(column, FilterOp.IS, value)

    def in_(self, column: str, values: Iterable[Any]) -> "Query":
        return self.where(column, FilterOp.IN, tuple(values))

    def order_by(self, column: str, descending: bool = False) -> "Query":
        key = Order(column=column, descending=descending)
        return self.model_copy(update={"order": self.order + (key,)})

    def limit_to(self, count: int) -> "Query":
        if count < 0:
            raise ValueError("limit must be >= 0")
        return self.model_copy(update={"limit": count})

    def offset_by(self, count: int) -> "Query":
        if count < 0:
            raise ValueError("offset must be >= 0")
        return self.model_copy(update={"offset": count})

    def page(self, number: int, size: int) -> "Query":
        """1-based page helper: page(2, 20) -> offset 20, limit 20."""
        if number < 1:
            raise ValueError("page number starts at 1")
        return self.limit_to(size).offset_by((number - 1) * size)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def to_params(self, include_select: bool = True) -> list[tuple[str, str]]:
        """
        Render as REST query parameters.

        Returned as a list of pairs because a column may be filtered more
        than once (e.g. a range: gte + lt on the same column).
        """
        params: list[tuple[str, str]] = []
        if include_select:
            params.append(("select", self.columns))
        params.extend(f.render() for f in self.filters)
        if self.order:
            params.append(("order", ",".join(o.render() for o in self.order)))
        if self.limit is not None:
            params.append(("limit", str(self.limit)))
        if self.offset is not None:
            params.append(("offset", str(self.offset)))
        return params

    def __str__(self) -> str:
        return "&".join(f"{k}={v}" for k, v in self.to_params())


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


# Characters that delimit items inside an `in.(...)` list
_LIST_RESERVED = set(',.:()"\\')


def _format_list_item(value: Any) -> str:
    """Render one `in` list item, double-quoting it when it contains a delimiter."""
    text = _format_value(value)
    if value is None or isinstance(value, (bool, int, float)):
        return text
    if _LIST_RESERVED.intersection(text) or text != text.strip():
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text
