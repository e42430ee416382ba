"""Shared test fixtures for Study Pods tests."""

import pytest
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from studypods.checkin.models import CheckIn, Mood, ProofType
from studypods.pods.models import JLPTLevel, Pod, PodStatus


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def sample_pod_id():
    return str(ObjectId())


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # find_one_and_update etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def make_cursor():
    """Build a motor-like cursor whose sort() chains and to_list() returns docs."""
    def _make(docs):
        cursor = MagicMock()
        cursor.sort = MagicMock(return_value=cursor)
        cursor.to_list = AsyncMock(return_value=docs)
        return cursor
    return _make


@pytest.fixture
def make_checkin():
    def _make(
        user_id,
        pod_id,
        day,
        minutes=45,
        mood=Mood.OKAY,
        proof_type=ProofType.NOTE,
    ):
        return CheckIn(
            id=str(ObjectId()),
            user_id=user_id,
            pod_id=pod_id,
            local_date=day,
            minutes=minutes,
            proof_type=proof_type,
            proof_content="Read two chapters of the N3 grammar book",
            mood=mood,
            created_at=datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc),
        )
    return _make


@pytest.fixture
def make_pod():
    def _make(
        pod_id=None,
        members=(),
        level=JLPTLevel.N3,
        window=(date(2026, 12, 1), date(2026, 12, 10)),
        capacity=6,
        created_at=datetime(2026, 9, 1, tzinfo=timezone.utc),
        member_exam_dates=None,
        status=PodStatus.OPEN,
    ):
        return Pod(
            id=pod_id or str(ObjectId()),
            member_ids=frozenset(members),
            member_exam_dates=member_exam_dates or {},
            target_level=level,
            exam_window_start=window[0],
            exam_window_end=window[1],
            capacity=capacity,
            created_at=created_at,
            status=status,
        )
    return _make
