"""Record store adapter over DynamoDB.

Services talk to the store through ``RecordStore`` using plain dict records
and ``Predicate`` filters. ``DynamoRecordStore`` is the only place that knows
about tables, condition expressions and botocore errors.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr, ConditionBase, ConditionExpressionBuilder
from botocore.exceptions import BotoCoreError, ClientError

from matchmaking.config import Settings, settings
from matchmaking.utils.errors import Conflict, NotFound, StoreUnavailable

logger = logging.getLogger(__name__)

# Partition key of each collection
COLLECTION_KEYS = {
    "users": "user_id",
    "admins": "admin_id",
    "applications": "application_id",
}


class Operator(str, Enum):
    EQ = "="


@dataclass(frozen=True)
class Condition:
    field: str
    operator: Operator
    value: Any


@dataclass(frozen=True)
class Predicate:
    """Conjunction of field conditions, built up with ``where``."""

    conditions: tuple[Condition, ...] = ()

    def where(self, field: str, value: Any, operator: Operator = Operator.EQ) -> "Predicate":
        return Predicate(self.conditions + (Condition(field, operator, value),))

    @property
    def is_empty(self) -> bool:
        return not self.conditions

    def matches(self, record: dict) -> bool:
        for condition in self.conditions:
            if condition.operator is Operator.EQ and record.get(condition.field) != condition.value:
                return False
        return True


def to_dynamo_condition(predicate: Predicate) -> ConditionBase | None:
    combined = None
    for condition in predicate.conditions:
        if condition.operator is Operator.EQ:
            clause = Attr(condition.field).eq(condition.value)
        else:
            raise ValueError(f"Unsupported operator: {condition.operator}")
        combined = clause if combined is None else combined & clause
    return combined


def compile_predicate(predicate: Predicate) -> tuple[str, dict, dict] | None:
    """Render a predicate as (expression, name placeholders, value placeholders)."""
    condition = to_dynamo_condition(predicate)
    if condition is None:
        return None
    built = ConditionExpressionBuilder().build_expression(condition)
    return (
        built.condition_expression,
        built.attribute_name_placeholders,
        built.attribute_value_placeholders,
    )


class RecordStore(ABC):
    @abstractmethod
    def get_by_id(self, collection: str, key: str) -> dict | None:
        ...

    @abstractmethod
    def scan(self, collection: str, predicate: Predicate | None = None) -> list[dict]:
        ...

    @abstractmethod
    def put(self, collection: str, record: dict) -> None:
        ...

    @abstractmethod
    def put_new(self, collection: str, record: dict) -> None:
        """Insert a record whose key must not exist yet; raises Conflict otherwise."""

    @abstractmethod
    def update(self, collection: str, key: str, assignments: dict) -> dict:
        """Set the given attributes on an existing record and return the new record."""


def _error_code(exc: ClientError) -> str | None:
    return exc.response.get("Error", {}).get("Code")


class DynamoRecordStore(RecordStore):
    def __init__(self, config: Settings = settings, resource=None):
        self._tables = config.table_names
        if resource is None:
            session = boto3.session.Session()
            resource = session.resource(
                "dynamodb",
                region_name=config.AWS_REGION,
                endpoint_url=config.DYNAMODB_ENDPOINT,
                aws_access_key_id=config.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=config.AWS_SECRET_ACCESS_KEY,
            )
        self._resource = resource

    def _table(self, collection: str):
        if collection not in self._tables:
            raise ValueError(f"Unknown collection: {collection}")
        return self._resource.Table(self._tables[collection])

    def get_by_id(self, collection: str, key: str) -> dict | None:
        key_name = COLLECTION_KEYS[collection]
        try:
            response = self._table(collection).get_item(Key={key_name: key})
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Error fetching %s %s", collection, key)
            raise StoreUnavailable(f"Could not read {collection}") from exc
        return response.get("Item")

    def scan(self, collection: str, predicate: Predicate | None = None) -> list[dict]:
        table = self._table(collection)
        params = {}
        condition = to_dynamo_condition(predicate) if predicate else None
        if condition is not None:
            params["FilterExpression"] = condition

        items: list[dict] = []
        try:
            while True:
                response = table.scan(**params)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                params["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Error scanning %s", collection)
            raise StoreUnavailable(f"Could not scan {collection}") from exc
        return items

    def put(self, collection: str, record: dict) -> None:
        try:
            self._table(collection).put_item(Item=record)
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Error writing to %s", collection)
            raise StoreUnavailable(f"Could not write {collection}") from exc

    def put_new(self, collection: str, record: dict) -> None:
        key_name = COLLECTION_KEYS[collection]
        try:
            self._table(collection).put_item(
                Item=record,
                ConditionExpression=Attr(key_name).not_exists(),
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                raise Conflict(f"{collection} record {record.get(key_name)} already exists") from exc
            logger.exception("Error inserting into %s", collection)
            raise StoreUnavailable(f"Could not write {collection}") from exc
        except BotoCoreError as exc:
            logger.exception("Error inserting into %s", collection)
            raise StoreUnavailable(f"Could not write {collection}") from exc

    def update(self, collection: str, key: str, assignments: dict) -> dict:
        if not assignments:
            raise ValueError("update requires at least one attribute")
        key_name = COLLECTION_KEYS[collection]

        clauses = []
        names = {}
        values = {}
        for index, (field, value) in enumerate(assignments.items()):
            names[f"#a{index}"] = field
            values[f":a{index}"] = value
            clauses.append(f"#a{index} = :a{index}")

        try:
            response = self._table(collection).update_item(
                Key={key_name: key},
                UpdateExpression="SET " + ", ".join(clauses),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ConditionExpression=Attr(key_name).exists(),
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                raise NotFound(f"{collection} record {key} not found") from exc
            logger.exception("Error updating %s %s", collection, key)
            raise StoreUnavailable(f"Could not update {collection}") from exc
        except BotoCoreError as exc:
            logger.exception("Error updating %s %s", collection, key)
            raise StoreUnavailable(f"Could not update {collection}") from exc
        return response.get("Attributes", {})

    def ensure_tables(self) -> list[str]:
        """Create any missing table (on-demand billing). Returns the names created."""
        created = []
        for collection, table_name in self._tables.items():
            key_name = COLLECTION_KEYS[collection]
            try:
                self._resource.create_table(
                    TableName=table_name,
                    KeySchema=[{"AttributeName": key_name, "KeyType": "HASH"}],
                    AttributeDefinitions=[{"AttributeName": key_name, "AttributeType": "S"}],
                    BillingMode="PAY_PER_REQUEST",
                )
            except ClientError as exc:
                if _error_code(exc) == "ResourceInUseException":
                    continue
                raise StoreUnavailable(f"Could not create table {table_name}") from exc
            logger.info("Created table %s", table_name)
            created.append(table_name)
        return created
