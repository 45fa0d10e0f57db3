"""
Tests for the analysis history stores and the consistency blender
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from swingcoach.models.analysis import AnalysisHistoryEntry, ScoreCard
from swingcoach.services.consistency_service import ConsistencyBlender
from swingcoach.services.history_store import FileHistoryStore

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def entry(overall, minutes=0, **metrics):
    return AnalysisHistoryEntry(timestamp=T0 + timedelta(minutes=minutes), overall_score=overall, metrics=metrics)


class TestHistoryStore:
    @pytest.mark.asyncio
    async def test_history_bound_keeps_most_recent(self, history_store):
        for i in range(5):
            await history_store.append("sig", entry(50 + i, minutes=i))

        entries = await history_store.get_list("sig")
        assert [e.overall_score for e in entries] == [52, 53, 54]

    @pytest.mark.asyncio
    async def test_signatures_are_independent(self, history_store):
        await history_store.append("a", entry(60))
        await history_store.append("b", entry(70))
        assert [e.overall_score for e in await history_store.get_list("a")] == [60]
        assert [e.overall_score for e in await history_store.get_list("b")] == [70]

    @pytest.mark.asyncio
    async def test_file_store_persists_across_instances(self, tmp_path):
        path = str(tmp_path / "history.json")
        store = FileHistoryStore(path, max_entries=3)
        await store.append("swing.mp4-10-1", entry(64, backswing=60))

        reloaded = await FileHistoryStore(path).get_list("swing.mp4-10-1")
        assert len(reloaded) == 1
        assert reloaded[0].overall_score == 64
        assert reloaded[0].metrics == {"backswing": 60}
        assert reloaded[0].timestamp == T0

    @pytest.mark.asyncio
    async def test_file_store_tolerates_corrupt_file(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text("{not json")
        assert await FileHistoryStore(str(path)).get_list("sig") == []


class TestConsistencyBlender:
    @pytest.mark.asyncio
    async def test_s2_blend_against_prior(self, history_store):
        await history_store.append("X", entry(60, backswing=60))
        blender = ConsistencyBlender(history_store)

        result = await blender.blend(ScoreCard(overall_score=80, metrics={"backswing": 80}), "X", T0)

        assert result.overall_score == 74
        assert result.metrics["backswing"] == 74
        latest = (await history_store.get_list("X"))[-1]
        assert latest.overall_score == 74

    @pytest.mark.asyncio
    async def test_small_differences_kept(self, history_store):
        await history_store.append("X", entry(70, backswing=70, grip=70))
        blender = ConsistencyBlender(history_store)

        result = await blender.blend(
            ScoreCard(overall_score=78, metrics={"backswing": 80, "grip": 84, "focus": 40}), "X", T0
        )

        assert result.overall_score == 78
        assert result.metrics["backswing"] == 80
        assert result.metrics["grip"] == 80
        assert result.metrics["focus"] == 40

    @pytest.mark.asyncio
    async def test_first_submission_recorded_unchanged(self, history_store):
        blender = ConsistencyBlender(history_store)
        card = ScoreCard(overall_score=66, metrics={"grip": 61})

        result = await blender.blend(card, "new", T0)

        assert result == card
        assert len(await history_store.get_list("new")) == 1

    @pytest.mark.asyncio
    async def test_concurrent_appends_keep_submission_order(self, history_store):
        blender = ConsistencyBlender(history_store)
        cards = [ScoreCard(overall_score=50 + i, metrics={}) for i in range(3)]

        await asyncio.gather(*(
            blender.blend(card, "same", T0 + timedelta(seconds=i)) for i, card in enumerate(cards)
        ))

        entries = await history_store.get_list("same")
        assert [e.overall_score for e in entries] == [50, 51, 52]

    @pytest.mark.asyncio
    async def test_signature_locks_released_after_blending(self, history_store):
        blender = ConsistencyBlender(history_store)

        await asyncio.gather(*(
            blender.blend(ScoreCard(overall_score=60, metrics={}), f"video-{i % 3}", T0)
            for i in range(9)
        ))

        assert blender._locks == {}
        assert blender._waiters == {}
        assert len(await history_store.get_list("video-0")) == 3
