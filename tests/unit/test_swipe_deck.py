"""Tests for the swipe deck."""

import asyncio

import pytest

from tintern.common.errors import ApiError
from tintern.jobs.swipe import LEFT, RIGHT, SWIPE_THRESHOLD, SwipeDeck, swipe_direction

JOBS = [{"_id": "j1", "title": "A"}, {"_id": "j2", "title": "B"}, {"id": "j1", "title": "A again"}]


class Recorder:
    def __init__(self, fail_for=()):
        self.saved = []
        self.fail_for = set(fail_for)

    async def __call__(self, job):
        job_id = job.get("_id") or job.get("id")
        if job_id in self.fail_for:
            raise ApiError(500, "Could not save job")
        self.saved.append(job_id)


class TestSwipeDirection:
    @pytest.mark.parametrize("offset,expected", [
        (SWIPE_THRESHOLD + 1, RIGHT),
        (-(SWIPE_THRESHOLD + 1), LEFT),
        (SWIPE_THRESHOLD, None),
        (-10, None),
        (0, None),
    ])
    def test_threshold(self, offset, expected):
        assert swipe_direction(offset) == expected


class TestSwipeDeck:
    @pytest.mark.asyncio
    async def test_right_saves_left_skips(self):
        save = Recorder()
        deck = SwipeDeck(JOBS, on_save=save)

        assert await deck.swipe(RIGHT)
        assert await deck.swipe(LEFT)

        assert save.saved == ["j1"]
        assert [f["_id"] for f in deck.favorites] == ["j1"]
        assert deck.current == JOBS[2]

    @pytest.mark.asyncio
    async def test_favorites_are_deduplicated(self):
        deck = SwipeDeck(JOBS, on_save=Recorder())

        for _ in JOBS:
            await deck.swipe(RIGHT)

        assert len(deck.favorites) == 2
        assert deck.exhausted
        assert not await deck.swipe(RIGHT)

    @pytest.mark.asyncio
    async def test_small_drag_snaps_back(self):
        deck = SwipeDeck(JOBS, on_save=Recorder())

        assert await deck.drag_end(20) is None
        assert deck.index == 0
        assert await deck.drag_end(-120) == LEFT
        assert deck.index == 1

    @pytest.mark.asyncio
    async def test_swipe_during_transition_is_ignored(self):
        release = asyncio.Event()

        async def slow_save(job):
            await release.wait()

        deck = SwipeDeck(JOBS, on_save=slow_save)
        first = asyncio.create_task(deck.swipe(RIGHT))
        await asyncio.sleep(0)

        assert deck.transition.active
        assert not await deck.swipe(LEFT)

        release.set()
        assert await first
        assert deck.index == 1

    @pytest.mark.asyncio
    async def test_save_failure_still_advances(self):
        deck = SwipeDeck(JOBS, on_save=Recorder(fail_for={"j1"}))

        assert await deck.swipe(RIGHT)

        assert deck.index == 1
        assert deck.favorites == []
        assert deck.last_error == "Could not save job"
        assert not deck.transition.active
