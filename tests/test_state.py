# tests/test_state.py
"""Local view state: optimistic updates and last-request-wins refetches."""

import asyncio

import pytest

from tutorlink.client.state import LatestRequestGate, LocalCollection, mutate_then_reconcile
from tutorlink.core.errors import InvalidStateTransition, NetworkError


def _demos():
    return LocalCollection(
        [
            {"id": "d1", "status": "pending", "admin_notes": None},
            {"id": "d2", "status": "accepted", "admin_notes": "call first"},
        ]
    )


class TestLocalCollection:

    def test_patch_returns_snapshot(self):
        demos = _demos()
        snapshot = demos.patch("d1", {"status": "accepted"})

        assert demos.get("d1")["status"] == "accepted"
        assert snapshot["status"] == "pending"

    def test_upsert_and_remove(self):
        demos = _demos()
        demos.upsert({"id": "d3", "status": "pending"})
        demos.upsert({"id": "d2", "admin_notes": ""})

        assert len(demos) == 3
        assert demos.get("d2") == {"id": "d2", "status": "accepted", "admin_notes": ""}
        assert demos.remove("d3")["id"] == "d3"
        assert demos.remove("missing") is None

    def test_patch_unknown_id_raises(self):
        with pytest.raises(KeyError):
            _demos().patch("nope", {"status": "x"})


class TestMutateThenReconcile:

    @pytest.mark.asyncio
    async def test_success_merges_server_record(self):
        demos = _demos()
        seen_during_call = {}

        async def call():
            seen_during_call.update(demos.get("d1"))
            return {
                "success": True,
                "data": {"id": "d1", "status": "accepted", "updated_at": "2024-03-01T10:05:00"},
            }

        await mutate_then_reconcile(demos, "d1", {"status": "accepted"}, call)

        assert seen_during_call["status"] == "accepted"
        assert demos.get("d1")["updated_at"] == "2024-03-01T10:05:00"

    @pytest.mark.asyncio
    async def test_failure_rolls_back_and_reraises(self):
        demos = _demos()
        before = dict(demos.get("d2"))

        async def call():
            raise InvalidStateTransition("Cannot change", current="accepted", target="rejected")

        with pytest.raises(InvalidStateTransition):
            await mutate_then_reconcile(demos, "d2", {"status": "rejected", "admin_notes": ""}, call)

        assert demos.get("d2") == before

    @pytest.mark.asyncio
    async def test_message_only_response_keeps_patch(self):
        demos = _demos()

        async def call():
            return {"success": True, "message": "Deleted", "data": None}

        await mutate_then_reconcile(demos, "d1", {"status": "cancelled"}, call)
        assert demos.get("d1")["status"] == "cancelled"


class TestLatestRequestGate:

    @pytest.mark.asyncio
    async def test_newer_request_wins(self):
        gate = LatestRequestGate(debounce=0)
        published = []

        async def slow_old_filter():
            await asyncio.sleep(0.2)
            return ["old"]

        async def fast_new_filter():
            return ["new"]

        old_task = asyncio.ensure_future(gate.run("jobs", slow_old_filter, published.append))
        await asyncio.sleep(0)
        new = await gate.run("jobs", fast_new_filter, published.append)
        old = await old_task

        assert old is None
        assert new == ["new"]
        assert published == [["new"]]
        assert gate.latest("jobs") == ["new"]
        assert gate.sequence("jobs") == 2

    @pytest.mark.asyncio
    async def test_debounce_coalesces_rapid_reissues(self):
        gate = LatestRequestGate(debounce=0.05)
        fetched = []

        def fetcher(term):
            async def fetch():
                fetched.append(term)
                return term
            return fetch

        tasks = [asyncio.ensure_future(gate.run("search", fetcher(t))) for t in ("m", "ma", "mat")]
        results = await asyncio.gather(*tasks)

        assert results == [None, None, "mat"]
        assert fetched == ["mat"]

    @pytest.mark.asyncio
    async def test_keys_are_independent(self):
        gate = LatestRequestGate(debounce=0)

        async def value(v):
            return v

        assert await gate.run("requests", lambda: value(1)) == 1
        assert await gate.run("demos", lambda: value(2)) == 2
        assert gate.latest("requests") == 1

    @pytest.mark.asyncio
    async def test_current_request_errors_surface(self):
        gate = LatestRequestGate(debounce=0)

        async def failing():
            raise NetworkError("offline", code="network_error")

        with pytest.raises(NetworkError):
            await gate.run("jobs", failing)

    @pytest.mark.asyncio
    async def test_superseded_errors_are_discarded(self):
        gate = LatestRequestGate(debounce=0)
        release = asyncio.Event()

        async def old_fails_late():
            await release.wait()
            raise NetworkError("late failure")

        async def newer():
            return "fresh"

        old_task = asyncio.ensure_future(gate.run("jobs", old_fails_late))
        await asyncio.sleep(0)
        assert await gate.run("jobs", newer) == "fresh"
        release.set()
        assert await old_task is None
