"""Tests for the Mongo-backed services with a mocked motor database."""

import pytest
from datetime import date, datetime, timezone
from unittest.mock import MagicMock
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from common.utils.exceptions import ConflictException, NotFoundException, ValidationException
from studypods.checkin.models import Mood, ProofType
from studypods.checkin.services.checkin_service import CheckInService
from studypods.coaching.models import CoachingInsight, InsightKind
from studypods.coaching.services.insight_service import InsightService
from studypods.pods.models import DissolutionReason, JLPTLevel, PodDraft, PodStatus
from studypods.pods.services.pod_service import PodService
from studypods.reviews.models import Target
from studypods.user.services.user_service import UserService


NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


def pod_doc(pod_id=None, members=(), capacity=6, status="open", window=("2026-12-01", "2026-12-10")):
    return {
        "_id": ObjectId(pod_id) if pod_id else ObjectId(),
        "targetLevel": "N3",
        "examWindowStart": window[0],
        "examWindowEnd": window[1],
        "capacity": capacity,
        "memberIds": [ObjectId(m) for m in members],
        "memberExamDates": {},
        "status": status,
        "createdAt": NOW,
    }


# ─────────────────────────────────────────────────────────────────
# CheckInService
# ─────────────────────────────────────────────────────────────────


class TestCheckInService:
    @pytest.mark.asyncio
    async def test_insert_sets_id(self, mock_db, mock_collection, make_checkin, sample_user_id, sample_pod_id):
        inserted_id = ObjectId()
        mock_collection.insert_one.return_value = MagicMock(inserted_id=inserted_id)
        checkin = make_checkin(sample_user_id, sample_pod_id, date(2026, 10, 19)).model_copy(update={"id": None})

        stored = await CheckInService(mock_db).insert_checkin(checkin)

        assert stored.id == str(inserted_id)
        document = mock_collection.insert_one.call_args.args[0]
        assert document["userId"] == ObjectId(sample_user_id)
        assert document["podId"] == ObjectId(sample_pod_id)
        assert document["date"] == "2026-10-19"
        assert document["proof"] == {"type": "note", "content": checkin.proof_content}
        assert document["mood"] == "okay"

    @pytest.mark.asyncio
    async def test_duplicate_key_maps_to_conflict(self, mock_db, mock_collection, make_checkin, sample_user_id, sample_pod_id):
        mock_collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")
        checkin = make_checkin(sample_user_id, sample_pod_id, date(2026, 10, 19))

        with pytest.raises(ConflictException) as exc_info:
            await CheckInService(mock_db).insert_checkin(checkin)

        assert exc_info.value.status_code == 409
        assert exc_info.value.code == "DUPLICATE_DAY"

    @pytest.mark.asyncio
    async def test_ensure_indexes_creates_unique_day_index(self, mock_db, mock_collection):
        await CheckInService(mock_db).ensure_indexes()

        first = mock_collection.create_index.call_args_list[0]
        assert first.args[0] == [("userId", 1), ("podId", 1), ("date", 1)]
        assert first.kwargs["unique"] is True
        assert first.kwargs["name"] == "one_checkin_per_day"

    @pytest.mark.asyncio
    async def test_get_user_checkins_builds_query(self, mock_db, mock_collection, make_cursor, sample_user_id, sample_pod_id):
        doc = {
            "_id": ObjectId(),
            "userId": ObjectId(sample_user_id),
            "podId": ObjectId(sample_pod_id),
            "date": "2026-10-18",
            "minutes": 50,
            "proof": {"type": "link", "content": "https://example.com/anki-stats"},
            "mood": "great",
            "createdAt": NOW,
        }
        mock_collection.find.return_value = make_cursor([doc])

        checkins = await CheckInService(mock_db).get_user_checkins(
            sample_user_id, pod_id=sample_pod_id, start_date=date(2026, 10, 12), end_date=date(2026, 10, 18)
        )

        query = mock_collection.find.call_args.args[0]
        assert query == {
            "userId": ObjectId(sample_user_id),
            "podId": ObjectId(sample_pod_id),
            "date": {"$gte": "2026-10-12", "$lte": "2026-10-18"},
        }
        assert len(checkins) == 1
        assert checkins[0].local_date == date(2026, 10, 18)
        assert checkins[0].proof_type is ProofType.LINK
        assert checkins[0].mood is Mood.GREAT
        assert checkins[0].user_id == sample_user_id

    @pytest.mark.asyncio
    async def test_get_user_checkins_across_pods(self, mock_db, mock_collection, make_cursor, sample_user_id):
        mock_collection.find.return_value = make_cursor([])

        await CheckInService(mock_db).get_user_checkins(sample_user_id, end_date=date(2026, 10, 19))

        query = mock_collection.find.call_args.args[0]
        assert "podId" not in query
        assert query["date"] == {"$lte": "2026-10-19"}

    @pytest.mark.asyncio
    async def test_get_pod_checkins(self, mock_db, mock_collection, make_cursor, sample_pod_id):
        cursor = make_cursor([])
        mock_collection.find.return_value = cursor

        result = await CheckInService(mock_db).get_pod_checkins(sample_pod_id)

        assert result == []
        assert mock_collection.find.call_args.args[0] == {"podId": ObjectId(sample_pod_id)}
        cursor.sort.assert_called_once_with("date", 1)


# ─────────────────────────────────────────────────────────────────
# PodService
# ─────────────────────────────────────────────────────────────────


class TestPodService:
    @pytest.mark.asyncio
    async def test_get_pod_not_found(self, mock_db, mock_collection, sample_pod_id):
        mock_collection.find_one.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            await PodService(mock_db).get_pod(sample_pod_id)

        assert exc_info.value.code == "POD_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_from_document_parses_dates(self, mock_db, mock_collection, sample_pod_id, sample_user_id):
        doc = pod_doc(sample_pod_id, members=[sample_user_id])
        doc["memberExamDates"] = {sample_user_id: "2026-12-06"}
        mock_collection.find_one.return_value = doc

        pod = await PodService(mock_db).get_pod(sample_pod_id)

        assert pod.id == sample_pod_id
        assert pod.member_ids == frozenset({sample_user_id})
        assert pod.member_exam_dates == {sample_user_id: date(2026, 12, 6)}
        assert pod.exam_window_start == date(2026, 12, 1)
        assert pod.target_level is JLPTLevel.N3

    @pytest.mark.asyncio
    async def test_create_pod_with_founder(self, mock_db, mock_collection, sample_user_id):
        mock_collection.insert_one.return_value = MagicMock(inserted_id=ObjectId())
        draft = PodDraft(JLPTLevel.N2, date(2026, 11, 22), date(2026, 12, 20), capacity=5)

        pod = await PodService(mock_db).create_pod(draft, founder_id=sample_user_id, founder_exam_date=date(2026, 12, 6))

        assert pod.member_ids == frozenset({sample_user_id})
        assert pod.capacity == 5
        assert pod.target_level is JLPTLevel.N2
        assert pod.is_open

    @pytest.mark.asyncio
    async def test_create_pod_rejects_capacity_before_writing(self, mock_db, mock_collection, sample_user_id):
        draft = PodDraft(JLPTLevel.N2, date(2026, 11, 22), date(2026, 12, 20), capacity=10)

        with pytest.raises(ValidationException) as exc_info:
            await PodService(mock_db).create_pod(draft, founder_id=sample_user_id)

        assert exc_info.value.code == "INVALID_POD_CAPACITY"
        mock_collection.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_member_uses_capacity_guard(self, mock_db, mock_collection, sample_pod_id, sample_user_id):
        mock_collection.find_one_and_update.return_value = pod_doc(sample_pod_id, members=[sample_user_id])

        pod = await PodService(mock_db).add_member(sample_pod_id, sample_user_id, exam_date=date(2026, 12, 6))

        assert pod.is_member(sample_user_id)
        query, update = mock_collection.find_one_and_update.call_args.args
        assert query["$expr"] == {"$lt": [{"$size": "$memberIds"}, "$capacity"]}
        assert query["status"] == "open"
        assert update["$addToSet"] == {"memberIds": ObjectId(sample_user_id)}
        assert update["$set"][f"memberExamDates.{sample_user_id}"] == "2026-12-06"

    @pytest.mark.asyncio
    async def test_add_member_to_full_pod(self, mock_db, mock_collection, sample_pod_id, sample_user_id):
        members = [str(ObjectId()) for _ in range(3)]
        mock_collection.find_one_and_update.return_value = None
        mock_collection.find_one.return_value = pod_doc(sample_pod_id, members=members, capacity=3)

        with pytest.raises(ConflictException) as exc_info:
            await PodService(mock_db).add_member(sample_pod_id, sample_user_id)

        assert exc_info.value.code == "POD_FULL"

    @pytest.mark.asyncio
    async def test_add_existing_member(self, mock_db, mock_collection, sample_pod_id, sample_user_id):
        mock_collection.find_one_and_update.return_value = None
        mock_collection.find_one.return_value = pod_doc(sample_pod_id, members=[sample_user_id])

        with pytest.raises(ConflictException) as exc_info:
            await PodService(mock_db).add_member(sample_pod_id, sample_user_id)

        assert exc_info.value.code == "ALREADY_MEMBER"

    @pytest.mark.asyncio
    async def test_add_member_to_dissolved_pod(self, mock_db, mock_collection, sample_pod_id, sample_user_id):
        mock_collection.find_one_and_update.return_value = None
        mock_collection.find_one.return_value = pod_doc(sample_pod_id, status="dissolved")

        with pytest.raises(ConflictException) as exc_info:
            await PodService(mock_db).add_member(sample_pod_id, sample_user_id)

        assert exc_info.value.code == "POD_DISSOLVED"

    @pytest.mark.asyncio
    async def test_last_member_leaving_dissolves(self, mock_db, mock_collection, sample_pod_id, sample_user_id):
        mock_collection.find_one_and_update.return_value = pod_doc(sample_pod_id, members=[])

        pod = await PodService(mock_db).remove_member(sample_pod_id, sample_user_id, today=date(2026, 10, 19))

        assert pod.status is PodStatus.DISSOLVED
        _, update = mock_collection.update_one.call_args.args
        assert update["$set"]["dissolvedReason"] == DissolutionReason.EMPTY.value

    @pytest.mark.asyncio
    async def test_leaving_keeps_pod_with_members(self, mock_db, mock_collection, sample_pod_id, sample_user_id):
        mock_collection.find_one_and_update.return_value = pod_doc(sample_pod_id, members=[str(ObjectId())])

        pod = await PodService(mock_db).remove_member(sample_pod_id, sample_user_id, today=date(2026, 10, 19))

        assert pod.is_open
        mock_collection.update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_leaving_pod_you_are_not_in(self, mock_db, mock_collection, sample_pod_id, sample_user_id):
        mock_collection.find_one_and_update.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            await PodService(mock_db).remove_member(sample_pod_id, sample_user_id, today=date(2026, 10, 19))

        assert exc_info.value.code == "NOT_A_MEMBER"

    @pytest.mark.asyncio
    async def test_dissolve_stale_pods(self, mock_db, mock_collection, make_cursor):
        empty = pod_doc()
        past = pod_doc(members=[str(ObjectId())], window=("2026-07-01", "2026-07-10"))
        active = pod_doc(members=[str(ObjectId())])
        mock_collection.find.return_value = make_cursor([empty, past, active])

        dissolved = await PodService(mock_db).dissolve_stale_pods(today=date(2026, 10, 19))

        assert dissolved == [str(empty["_id"]), str(past["_id"])]
        assert mock_collection.update_one.call_count == 2

    @pytest.mark.asyncio
    async def test_find_open_pods(self, mock_db, mock_collection, make_cursor):
        mock_collection.find.return_value = make_cursor([pod_doc(), pod_doc()])

        pods = await PodService(mock_db).find_open_pods(JLPTLevel.N3)

        assert len(pods) == 2
        assert mock_collection.find.call_args.args[0] == {"status": "open", "targetLevel": "N3"}


# ─────────────────────────────────────────────────────────────────
# UserService
# ─────────────────────────────────────────────────────────────────


class TestUserService:
    @pytest.mark.asyncio
    async def test_get_profile(self, mock_db, mock_collection, sample_user_id):
        excluded = ObjectId()
        mock_collection.find_one.return_value = {
            "_id": ObjectId(sample_user_id),
            "jlptLevel": "N3",
            "examDate": datetime(2026, 12, 6, tzinfo=timezone.utc),
            "timezone": "Asia/Tokyo",
            "podPreferences": {"excludedPodIds": [excluded], "maxMembers": 4},
        }

        profile = await UserService(mock_db).get_profile(sample_user_id)

        assert profile.user_id == sample_user_id
        assert profile.level is JLPTLevel.N3
        assert profile.exam_date == date(2026, 12, 6)
        assert profile.timezone == "Asia/Tokyo"
        assert profile.preferences.excluded_pod_ids == frozenset({str(excluded)})
        assert profile.preferences.max_members == 4

    @pytest.mark.asyncio
    async def test_profile_defaults(self, mock_db, mock_collection, sample_user_id):
        mock_collection.find_one.return_value = {
            "_id": ObjectId(sample_user_id),
            "jlptLevel": "N5",
            "examDate": "2027-07-04",
        }

        profile = await UserService(mock_db).get_profile(sample_user_id)

        assert profile.timezone == "UTC"
        assert profile.preferences.max_members is None

    @pytest.mark.asyncio
    async def test_user_not_found(self, mock_db, mock_collection, sample_user_id):
        mock_collection.find_one.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            await UserService(mock_db).get_profile(sample_user_id)

        assert exc_info.value.code == "USER_NOT_FOUND"


# ─────────────────────────────────────────────────────────────────
# InsightService
# ─────────────────────────────────────────────────────────────────


class TestInsightService:
    @pytest.mark.asyncio
    async def test_record_insights(self, mock_db, mock_collection):
        insight = CoachingInsight(
            kind=InsightKind.ENCOURAGE,
            target=Target.user("user-1"),
            message="7 days in a row. Keep the streak going!",
            generated_at=NOW,
            evidence={"currentStreak": 7},
        )

        count = await InsightService(mock_db).record_insights([insight])

        assert count == 1
        docs = mock_collection.insert_many.call_args.args[0]
        assert docs[0]["kind"] == "encourage"
        assert docs[0]["targetKind"] == "user"
        assert docs[0]["notify"] is True

    @pytest.mark.asyncio
    async def test_record_nothing(self, mock_db, mock_collection):
        assert await InsightService(mock_db).record_insights([]) == 0
        mock_collection.insert_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_recent_insights(self, mock_db, mock_collection, make_cursor):
        mock_collection.find.return_value = make_cursor([
            {
                "_id": ObjectId(),
                "kind": "warn-drop-off",
                "targetKind": "pod",
                "targetId": "pod-1",
                "message": "Participation has dropped",
                "evidence": {},
                "createdAt": NOW,
            }
        ])

        insights = await InsightService(mock_db).get_recent_insights(Target.pod("pod-1"), since=NOW)

        assert insights[0].kind is InsightKind.WARN_DROP_OFF
        assert insights[0].target == Target.pod("pod-1")
        query = mock_collection.find.call_args.args[0]
        assert query["createdAt"] == {"$gte": NOW}
        assert query["notify"] is True
