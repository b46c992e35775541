import asyncio
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from ccc_mocktest.core.exceptions import DuplicateUserError
from ccc_mocktest.core.stores import QuestionStore, ResultStore, UserStore


BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _matches(document, query):
    for key, expected in query.items():
        value = document.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


def _sorted(documents, sort):
    ordered = list(documents)
    for key, direction in reversed(sort or []):
        ordered.sort(key=lambda d: d.get(key), reverse=direction < 0)
    return ordered


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents

    def sort(self, sort):
        self.documents = _sorted(self.documents, sort)
        return self

    async def to_list(self, length=None):
        return [dict(d) for d in self.documents[:length]]


class FakeCollection:
    """Just enough of a Motor collection for the stores"""

    def __init__(self, documents=None, unique_key=None):
        self.documents = [dict(d) for d in documents or []]
        self.unique_key = unique_key
        self.pipelines = []

    async def find_one(self, query, sort=None):
        found = _sorted([d for d in self.documents if _matches(d, query)], sort)
        return dict(found[0]) if found else None

    def find(self, query, projection=None):
        found = [d for d in self.documents if _matches(d, query)]
        if projection:
            hidden = [key for key, flag in projection.items() if not flag]
            found = [{k: v for k, v in d.items() if k not in hidden} for d in found]
        return FakeCursor(found)

    async def insert_one(self, document):
        key = self.unique_key
        if key and any(d.get(key) == document.get(key) for d in self.documents):
            raise DuplicateKeyError(f"E11000 duplicate key error: {key}")
        stored = dict(document, _id=document.get("_id") or ObjectId())
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def find_one_and_update(self, query, update, return_document=None):
        for document in self.documents:
            if _matches(document, query):
                document.update(update["$set"])
                return dict(document)
        return None

    async def delete_one(self, query):
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def count_documents(self, query):
        return sum(1 for d in self.documents if _matches(d, query))

    def aggregate(self, pipeline):
        self.pipelines.append(pipeline)
        if not self.documents:
            return FakeCursor([])
        scores = [d["score"] for d in self.documents]
        return FakeCursor([{"_id": None, "count": len(scores), "total": sum(scores), "highest": max(scores)}])


def run(coroutine):
    return asyncio.run(coroutine)


def _result(student, roll_number, score, minutes, _id=None):
    return {
        "_id": _id or ObjectId(),
        "student": student,
        "rollNumber": roll_number,
        "score": score,
        "createdAt": BASE_TIME + timedelta(minutes=minutes),
    }


# ---- users ----

def test_duplicate_key_on_insert_maps_to_duplicate_user():
    collection = FakeCollection([{"_id": ObjectId(), "rollNumber": "R-1", "role": "student"}], unique_key="rollNumber")
    store = UserStore(collection)

    with pytest.raises(DuplicateUserError):
        run(store.create({"name": "Asha", "rollNumber": "R-1", "password": "hash", "role": "student"}))
    assert len(collection.documents) == 1


def test_create_user_stamps_id_and_created_at():
    store = UserStore(FakeCollection(unique_key="rollNumber"))

    user = run(store.create({"name": "Asha", "rollNumber": "R-1", "password": "hash", "role": "student"}))

    assert isinstance(user["_id"], ObjectId)
    assert isinstance(user["createdAt"], datetime)
    assert run(store.find_by_id(str(user["_id"])))["rollNumber"] == "R-1"


def test_find_many_by_ids_hides_password_and_skips_bad_ids():
    users = [{"_id": ObjectId(), "rollNumber": f"R-{n}", "password": "hash", "role": "student"} for n in range(3)]
    store = UserStore(FakeCollection(users))

    found = run(store.find_many_by_ids([str(users[0]["_id"]), "not-an-id", users[2]["_id"]]))

    assert {u["rollNumber"] for u in found} == {"R-0", "R-2"}
    assert all("password" not in u for u in found)
    assert run(store.find_many_by_ids(["nope", None])) == []


def test_invalid_user_id_finds_nothing():
    store = UserStore(FakeCollection([{"_id": ObjectId(), "rollNumber": "R-1"}]))

    assert run(store.find_by_id("not-an-id")) is None
    assert run(store.find_by_id(None)) is None


def test_count_students_ignores_admins():
    store = UserStore(FakeCollection([
        {"_id": ObjectId(), "rollNumber": "R-1", "role": "student"},
        {"_id": ObjectId(), "rollNumber": "R-2", "role": "student"},
        {"_id": ObjectId(), "rollNumber": "A-1", "role": "admin"},
    ]))

    assert run(store.count_students()) == 2


# ---- questions ----

def test_question_list_is_oldest_first_with_id_tiebreak():
    first, second = sorted([ObjectId(), ObjectId()])
    collection = FakeCollection([
        {"_id": ObjectId(), "questionText": "late", "createdAt": BASE_TIME + timedelta(minutes=5)},
        {"_id": second, "questionText": "tie-b", "createdAt": BASE_TIME},
        {"_id": first, "questionText": "tie-a", "createdAt": BASE_TIME},
    ])

    questions = run(QuestionStore(collection).list_all())

    assert [q["questionText"] for q in questions] == ["tie-a", "tie-b", "late"]


def test_question_update_and_delete():
    store = QuestionStore(FakeCollection())
    question = run(store.create({"questionText": "Q?", "options": ["A", "B"]}))
    question_id = str(question["_id"])

    updated = run(store.update(question_id, {"questionText": "Edited?"}))
    assert updated["questionText"] == "Edited?"
    assert updated["updatedAt"] >= question["updatedAt"]

    assert run(store.delete(question_id)) is True
    assert run(store.delete(question_id)) is False
    assert run(store.count()) == 0


def test_question_writes_with_invalid_id_do_nothing():
    collection = FakeCollection([{"_id": ObjectId(), "questionText": "Q?"}])
    store = QuestionStore(collection)

    assert run(store.get_by_id("zzz")) is None
    assert run(store.update("zzz", {"questionText": "x"})) is None
    assert run(store.delete("zzz")) is False
    assert run(store.get_many(["zzz"])) == []
    assert collection.documents[0]["questionText"] == "Q?"


# ---- results ----

def test_results_are_newest_first():
    student = ObjectId()
    collection = FakeCollection([
        _result(student, "R-1", 3, minutes=1),
        _result(student, "R-1", 7, minutes=9),
        _result(ObjectId(), "R-2", 5, minutes=4),
    ])
    store = ResultStore(collection)

    assert [r["score"] for r in run(store.find_all())] == [7, 5, 3]
    assert [r["score"] for r in run(store.find_by_student(str(student)))] == [7, 3]
    assert run(store.count_by_student(student)) == 2


def test_latest_result_by_student_and_roll_number():
    student = ObjectId()
    older, newer = sorted([ObjectId(), ObjectId()])
    collection = FakeCollection([
        _result(student, "R-1", 2, minutes=1),
        _result(student, "R-1", 4, minutes=6, _id=older),
        _result(student, "R-1", 9, minutes=6, _id=newer),
        _result(ObjectId(), "R-2", 10, minutes=20),
    ])
    store = ResultStore(collection)

    assert run(store.latest_by_student(str(student)))["score"] == 9
    assert run(store.latest_by_roll_number("R-1"))["score"] == 9
    assert run(store.latest_by_roll_number("R-404")) is None
    assert run(store.latest_by_student("bad-id")) is None
    assert run(store.find_by_student("bad-id")) == []
    assert run(store.count_by_student("bad-id")) == 0


def test_create_result_stamps_timestamps():
    store = ResultStore(FakeCollection())

    result = run(store.create({"student": ObjectId(), "rollNumber": "R-1", "score": 3}))

    assert isinstance(result["_id"], ObjectId)
    assert result["createdAt"] == result["updatedAt"]


def test_aggregate_scores_on_empty_collection():
    collection = FakeCollection()

    assert run(ResultStore(collection).aggregate_scores()) == {"count": 0, "total": 0, "highest": 0}
    assert collection.pipelines[0][0]["$group"]["highest"] == {"$max": "$score"}


def test_aggregate_scores_totals_every_result():
    collection = FakeCollection([
        _result(ObjectId(), "R-1", 3, minutes=1),
        _result(ObjectId(), "R-2", 8, minutes=2),
        _result(ObjectId(), "R-3", 0, minutes=3),
    ])

    assert run(ResultStore(collection).aggregate_scores()) == {"count": 3, "total": 11, "highest": 8}
