# =============================================================================
# lib/testing.py - Scripted DataAccess Double
# =============================================================================
# Drop-in replacement for LiveDataAccess in tests. Each verb is an AsyncMock,
# so the usual mock assertions work directly:
#
#   data = ScriptedDataAccess()
#   data.script("select", returns=[{"id": 1, "title": "Hello"}])
#   data.script("insert", raises=TransportError("offline"))
#
#   posts = await service_under_test(data)
#
#   data.select.assert_awaited_once_with("blog_posts", Query().eq("published", True))
#   assert data.insert.await_count == 1
#
# Unscripted defaults: select -> [], select_one -> None (NotFoundError when
# must_exist=True), insert -> the submitted record, update/delete -> 0.
# =============================================================================

from typing import Any
from unittest.mock import AsyncMock

from core.models.query import Query
from lib.errors import NotFoundError

VERBS = ("select", "select_one", "insert", "update", "delete")

_UNSET = object()


async def _default_select(collection: str, query: Query | None = None) -> list[dict[str, Any]]:
    return []


async def _default_select_one(
    collection: str,
    query: Query | None = None,
    *,
    must_exist: bool = False,
) -> dict[str, Any] | None:
    if must_exist:
        raise NotFoundError(collection, query)
    return None


async def _default_insert(collection: str, record: dict[str, Any]) -> dict[str, Any]:
    return dict(record)


async def _default_update(collection: str, query: Query, changes: dict[str, Any]) -> int:
    return 0


async def _default_delete(collection: str, query: Query) -> int:
    return 0


_DEFAULTS = {
    "select": _default_select,
    "select_one": _default_select_one,
    "insert": _default_insert,
    "update": _default_update,
    "delete": _default_delete,
}


class ScriptedDataAccess:
    """
    Controllable DataAccess double.

    Attributes:
        select, select_one, insert, update, delete: AsyncMock per verb
    """

    def __init__(self):
        self.select = AsyncMock(side_effect=_default_select)
        self.select_one = AsyncMock(side_effect=_default_select_one)
        self.insert = AsyncMock(side_effect=_default_insert)
        self.update = AsyncMock(side_effect=_default_update)
        self.delete = AsyncMock(side_effect=_default_delete)

    def verb(self, name: str) -> AsyncMock:
        if name not in VERBS:
            raise ValueError(f"Unknown verb {name!r}; expected one of {', '.join(VERBS)}")
        return getattr(self, name)

    def script(self, verb: str, *, returns: Any = _UNSET, raises: BaseException | None = None) -> AsyncMock:
        """
        Configure one verb to return a canned result or raise an error.

        Args:
            verb: One of select, select_one, insert, update, delete
            returns: Value every call returns
            raises: Exception every call raises (takes precedence)

        Returns:
            The verb's AsyncMock, for further configuration
        """
        mock = self.verb(verb)
        if raises is not None:
            mock.side_effect = raises
        elif returns is not _UNSET:
            mock.side_effect = None
            mock.return_value = returns
        else:
            raise ValueError("script() needs returns= or raises=")
        return mock

    def reset(self) -> None:
        """Forget recorded calls and restore default behaviour."""
        for name in VERBS:
            mock = self.verb(name)
            mock.reset_mock(return_value=True, side_effect=True)
            mock.side_effect = _DEFAULTS[name]

    def calls(self, verb: str) -> list[tuple[tuple, dict]]:
        """Positional/keyword arguments of every awaited call to `verb`."""
        return [(c.args, c.kwargs) for c in self.verb(verb).await_args_list]
