from unittest.mock import MagicMock

import pytest
from boto3.dynamodb.conditions import ConditionBase
from botocore.exceptions import EndpointConnectionError

from fakes import client_error
from matchmaking.config import settings
from matchmaking.services.record_store import (
    DynamoRecordStore,
    Operator,
    Predicate,
    compile_predicate,
    to_dynamo_condition,
)
from matchmaking.utils.errors import Conflict, NotFound, StoreUnavailable


@pytest.fixture()
def table():
    return MagicMock()


@pytest.fixture()
def dynamo(table):
    resource = MagicMock()
    resource.Table.return_value = table
    return DynamoRecordStore(settings, resource=resource), resource


def test_predicate_where_is_immutable():
    base = Predicate()
    extended = base.where("city", "london")

    assert base.is_empty
    assert extended.conditions[0].field == "city"
    assert extended.conditions[0].operator is Operator.EQ


def test_compile_predicate_aliases_names_and_values():
    predicate = Predicate().where("name", "sam").where("approved", True)

    expression, names, values = compile_predicate(predicate)

    # "name" is a DynamoDB reserved word; it must only appear through a placeholder
    assert "name" not in expression
    assert " AND " in expression
    assert sorted(names.values()) == ["approved", "name"]
    assert sorted(values.values(), key=str) == [True, "sam"]
    for placeholder in list(names) + list(values):
        assert placeholder in expression


def test_compile_empty_predicate_returns_none():
    assert compile_predicate(Predicate()) is None
    assert to_dynamo_condition(Predicate()) is None


def test_get_by_id_uses_collection_table_and_key(dynamo, table):
    store, resource = dynamo
    table.get_item.return_value = {"Item": {"user_id": "u1"}}

    assert store.get_by_id("users", "u1") == {"user_id": "u1"}
    resource.Table.assert_called_with(settings.USERS_TABLE)
    table.get_item.assert_called_once_with(Key={"user_id": "u1"})


def test_get_by_id_returns_none_when_absent(dynamo, table):
    store, _ = dynamo
    table.get_item.return_value = {}

    assert store.get_by_id("applications", "missing") is None


def test_scan_follows_pagination_and_passes_filter(dynamo, table):
    store, _ = dynamo
    table.scan.side_effect = [
        {"Items": [{"application_id": "a1"}], "LastEvaluatedKey": {"application_id": "a1"}},
        {"Items": [{"application_id": "a2"}]},
    ]

    items = store.scan("applications", Predicate().where("approved", True))

    assert [item["application_id"] for item in items] == ["a1", "a2"]
    first_call, second_call = table.scan.call_args_list
    assert isinstance(first_call.kwargs["FilterExpression"], ConditionBase)
    assert "ExclusiveStartKey" not in first_call.kwargs
    assert second_call.kwargs["ExclusiveStartKey"] == {"application_id": "a1"}


def test_scan_without_predicate_has_no_filter(dynamo, table):
    store, _ = dynamo
    table.scan.return_value = {"Items": []}

    assert store.scan("users") == []
    assert "FilterExpression" not in table.scan.call_args.kwargs


def test_client_errors_become_store_unavailable(dynamo, table):
    store, _ = dynamo
    table.scan.side_effect = client_error("ProvisionedThroughputExceededException", "Scan")
    table.get_item.side_effect = EndpointConnectionError(endpoint_url="http://dynamo")

    with pytest.raises(StoreUnavailable):
        store.scan("users")
    with pytest.raises(StoreUnavailable):
        store.get_by_id("users", "u1")


def test_put_new_conflicts_on_existing_key(dynamo, table):
    store, _ = dynamo
    table.put_item.side_effect = client_error("ConditionalCheckFailedException", "PutItem")

    with pytest.raises(Conflict):
        store.put_new("users", {"user_id": "u1"})
    assert "ConditionExpression" in table.put_item.call_args.kwargs


def test_update_builds_set_expression(dynamo, table):
    store, _ = dynamo
    table.update_item.return_value = {"Attributes": {"application_id": "a1", "approved": True}}

    result = store.update("applications", "a1", {"approved": True})

    assert result == {"application_id": "a1", "approved": True}
    kwargs = table.update_item.call_args.kwargs
    assert kwargs["Key"] == {"application_id": "a1"}
    assert kwargs["UpdateExpression"] == "SET #a0 = :a0"
    assert kwargs["ExpressionAttributeNames"] == {"#a0": "approved"}
    assert kwargs["ExpressionAttributeValues"] == {":a0": True}
    assert kwargs["ReturnValues"] == "ALL_NEW"


def test_update_missing_record_is_not_found(dynamo, table):
    store, _ = dynamo
    table.update_item.side_effect = client_error("ConditionalCheckFailedException", "UpdateItem")

    with pytest.raises(NotFound):
        store.update("applications", "missing", {"approved": True})


def test_ensure_tables_skips_existing(dynamo):
    store, resource = dynamo
    resource.create_table.side_effect = [None, client_error("ResourceInUseException", "CreateTable"), None]

    created = store.ensure_tables()

    assert created == [settings.USERS_TABLE, settings.APPLICATIONS_TABLE]
