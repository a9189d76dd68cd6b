import pytest

from fakes import admin_token, auth, sign_up_and_in
from matchmaking.services.search_service import SearchService, build_search_predicate


def _field_values(predicate):
    return {(condition.field, condition.value) for condition in predicate.conditions}


def test_empty_criteria_only_filters_on_approval():
    predicate = build_search_predicate({})

    assert _field_values(predicate) == {("approved", True)}


def test_falsy_criteria_are_dropped():
    predicate = build_search_predicate({"city": "", "age": 0, "has_children": False, "religion": None})

    assert _field_values(predicate) == {("approved", True)}


def test_criteria_are_normalized_and_mapped():
    predicate = build_search_predicate(
        {"city": " London ", "gender": "FEMALE", "age": 30, "education": "BSc", "want_children": True}
    )

    assert _field_values(predicate) == {
        ("city", "london"),
        ("gender", "female"),
        ("age", 30),
        ("university_degree", "bsc"),
        ("want_children", True),
        ("approved", True),
    }
    # approval is always the last conjunct
    assert predicate.conditions[-1].field == "approved"


@pytest.fixture()
def seeded(store):
    rows = [
        {"application_id": "a1", "user_id": "u1", "city": "london", "gender": "female", "age": 30, "approved": True},
        {"application_id": "a2", "user_id": "u2", "city": "london", "gender": "male", "age": 30, "approved": False},
        {"application_id": "a3", "user_id": "u3", "city": "leeds", "gender": "female", "age": 25, "approved": True},
    ]
    for row in rows:
        store.put("applications", row)
    return rows


def test_search_without_criteria_returns_all_approved(store, applications, seeded):
    results = SearchService(store, applications).search({})

    assert {row["application_id"] for row in results} == {"a1", "a3"}


def test_search_by_city_is_case_insensitive(store, applications, seeded):
    results = SearchService(store, applications).search({"city": "London"})

    assert [row["application_id"] for row in results] == ["a1"]
    assert results[0]["photo"] is None


def test_search_is_exact_match_only(store, applications, seeded):
    assert SearchService(store, applications).search({"city": "lon"}) == []
    assert SearchService(store, applications).search({"age": 29}) == []


def test_search_endpoint_for_users_and_admins(client, store, seeded):
    token, _ = sign_up_and_in(client)
    admin = admin_token(client)

    user_view = client.post("/applications/search", json={"city": "LONDON"}, headers=auth(token))
    admin_view = client.post("/admin/applications/search", json={"gender": "female"}, headers=auth(admin))

    assert user_view.status_code == 200
    assert user_view.json()["data"]["count"] == 1
    assert {row["application_id"] for row in admin_view.json()["data"]["results"]} == {"a1", "a3"}


def test_search_endpoint_accepts_camel_case_criteria(client, store, seeded):
    store.update("applications", "a3", {"has_children": True})
    token, _ = sign_up_and_in(client)

    response = client.post("/applications/search", json={"hasChildren": True}, headers=auth(token))

    assert [row["application_id"] for row in response.json()["data"]["results"]] == ["a3"]


def test_search_requires_authentication(client):
    assert client.post("/applications/search", json={}).status_code == 401


def test_search_scans_the_store_it_was_given(store, applications, seeded):
    SearchService(store, applications).search({"gender": "Female"})

    collection, predicate = store.scans[-1]
    assert collection == "applications"
    assert _field_values(predicate) == {("gender", "female"), ("approved", True)}
