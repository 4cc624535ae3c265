# =============================================================================
# tests/test_testing.py - Scripted DataAccess Double Tests
# =============================================================================
# The double must behave like the façade by default and let each verb be
# scripted independently, so higher-level code can be tested offline.
# =============================================================================

import pytest

from core.models.query import Query
from lib.data_access import DataAccess
from lib.errors import NotFoundError, TransportError, UnauthenticatedError
from lib.testing import ScriptedDataAccess


async def latest_published_title(data: DataAccess) -> str | None:
    """Small piece of calling code exercised through the double."""
    post = await data.select_one(
        "blog_posts",
        Query().eq("published", True).order_by("created_at", descending=True),
    )
    return post["title"] if post else None


@pytest.fixture
def double() -> ScriptedDataAccess:
    return ScriptedDataAccess()


def test_satisfies_protocol(double):
    assert isinstance(double, DataAccess)


class TestDefaults:
    """Test unscripted behaviour."""

    @pytest.mark.asyncio
    async def test_default_results(self, double):
        assert await double.select("posts") == []
        assert await double.select_one("posts") is None
        assert await double.insert("posts", {"title": "x"}) == {"title": "x"}
        assert await double.update("posts", Query().eq("id", 1), {"title": "y"}) == 0
        assert await double.delete("posts", Query().eq("id", 1)) == 0

    @pytest.mark.asyncio
    async def test_keyword_arguments_match_facade(self, double):
        """Test every verb accepts the façade's parameter names as keywords."""
        query = Query().eq("id", 1)

        assert await double.select(collection="posts", query=query) == []
        assert await double.select_one(collection="posts", query=query, must_exist=False) is None
        assert await double.insert(collection="posts", record={"title": "x"}) == {"title": "x"}
        assert await double.update(collection="posts", query=query, changes={"title": "y"}) == 0
        assert await double.update("posts", query, changes={"title": "y"}) == 0
        assert await double.delete(collection="posts", query=query) == 0

    @pytest.mark.asyncio
    async def test_keyword_arguments_after_reset(self, double):
        double.reset()

        assert await double.update("posts", Query().eq("id", 1), changes={"read": True}) == 0
        assert await double.delete("posts", query=Query().eq("id", 1)) == 0

    @pytest.mark.asyncio
    async def test_must_exist_raises_not_found(self, double):
        with pytest.raises(NotFoundError):
            await double.select_one("posts", Query().eq("id", 1), must_exist=True)


class TestScripting:
    """Test canned results and errors."""

    @pytest.mark.asyncio
    async def test_scripted_result_and_call_assertions(self, double):
        double.script("select_one", returns={"title": "Hello"})

        assert await latest_published_title(double) == "Hello"

        double.select_one.assert_awaited_once_with(
            "blog_posts",
            Query().eq("published", True).order_by("created_at", descending=True),
        )
        assert double.select.await_count == 0

    @pytest.mark.asyncio
    async def test_scripted_error(self, double):
        double.script("insert", raises=TransportError("offline"))

        with pytest.raises(TransportError):
            await double.insert("posts", {"title": "x"})

        assert double.insert.await_count == 1

    @pytest.mark.asyncio
    async def test_verbs_are_independent(self, double):
        double.script("select", raises=UnauthenticatedError())
        double.script("delete", returns=4)

        assert await double.delete("posts", Query().eq("draft", True)) == 4
        with pytest.raises(UnauthenticatedError):
            await double.select("posts")

    @pytest.mark.asyncio
    async def test_calls_lists_arguments(self, double):
        await double.insert("posts", {"title": "a"})
        await double.insert("posts", {"title": "b"})

        assert double.calls("insert") == [
            (("posts", {"title": "a"}), {}),
            (("posts", {"title": "b"}), {}),
        ]

    @pytest.mark.asyncio
    async def test_reset_restores_defaults(self, double):
        double.script("select", returns=[{"id": 1}])
        await double.select("posts")

        double.reset()

        assert double.select.await_count == 0
        assert await double.select("posts") == []

    def test_unknown_verb_rejected(self, double):
        with pytest.raises(ValueError):
            double.script("upsert", returns=[])

    def test_script_needs_a_behaviour(self, double):
        with pytest.raises(ValueError):
            double.script("select")
