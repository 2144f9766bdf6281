"""
Unit tests for MongoConnector.

Tests the native document store connector with a mocked AsyncMongoClient.
"""

from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from dbconnect.connectors.base import ConnectError
from dbconnect.connectors.mongo import MongoConnector
from dbconnect.models import ConnectionSpec, ConnectOptions


def _build_client(database_name: str = "db1"):
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.close = AsyncMock()

    database = Mock()
    database.name = database_name
    database.client = client
    client.get_default_database = Mock(return_value=database)

    sub_databases = {}

    def get_item(name):
        return sub_databases.setdefault(name, Mock(name=f"database:{name}"))

    client.__getitem__.side_effect = get_item
    return client, database


@pytest.fixture
def mongo_client():
    client, database = _build_client()
    with patch("dbconnect.connectors.mongo.AsyncMongoClient", return_value=client) as factory:
        yield factory, client, database


class TestConnect:
    """Test connection and name resolution."""

    @pytest.mark.asyncio
    async def test_connect_with_aliases(self, options, sink, mongo_client):
        _, client, database = mongo_client
        spec = ConnectionSpec(
            connection_string="mongodb://localhost/db1",
            name=["db1:alpha", "db1:beta"],
        )

        handles = await MongoConnector(options).connect(spec)

        assert [h.name for h in handles] == ["db1:alpha, beta", "alpha", "beta"]
        assert handles[0].handle is database
        assert handles[0].parent is None
        assert handles[1].parent == "db1:alpha, beta"
        assert handles[1].handle is handles[2].handle is client["db1"]
        client.admin.command.assert_awaited_once_with("ping")
        sink.info.assert_called_once_with("Mongo/db1:alpha, db1:beta connection OK")

    @pytest.mark.asyncio
    async def test_alias_defaults_to_physical_name(self, options, mongo_client):
        _, client, _ = mongo_client
        spec = ConnectionSpec(connection_string="mongodb://localhost/db1", name=["db1", "logs"])

        handles = await MongoConnector(options).connect(spec)

        assert [h.name for h in handles] == ["db1:db1, logs", "db1", "logs"]
        assert handles[2].handle is client["logs"]

    @pytest.mark.asyncio
    async def test_default_name_is_physical_database(self, options, sink, mongo_client):
        spec = ConnectionSpec(connection_string="mongodb://localhost/db1")

        handles = await MongoConnector(options).connect(spec)

        assert [h.name for h in handles] == ["db1:db1", "db1"]
        sink.info.assert_called_once_with("Mongo/db1 connection OK")

    @pytest.mark.asyncio
    async def test_custom_separator(self, sink, mongo_client):
        _, client, _ = mongo_client
        spec = ConnectionSpec(connection_string="mongodb://localhost/db1", name="reports|rep")

        handles = await MongoConnector(ConnectOptions(logger=sink, separator="|")).connect(spec)

        assert [h.name for h in handles] == ["db1:rep", "rep"]
        assert handles[1].handle is client["reports"]

    @pytest.mark.asyncio
    async def test_driver_options_passed_through(self, options, mongo_client):
        factory, _, _ = mongo_client
        spec = ConnectionSpec.model_validate(
            {"connection_string": "mongodb://localhost/db1", "serverSelectionTimeoutMS": 500}
        )

        await MongoConnector(options).connect(spec)

        factory.assert_called_once_with("mongodb://localhost/db1", serverSelectionTimeoutMS=500)

    @pytest.mark.asyncio
    async def test_ping_failure_raises_connect_error(self, options, mongo_client):
        _, client, _ = mongo_client
        client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
        spec = ConnectionSpec(connection_string="mongodb://localhost/db1", name="db1")

        with pytest.raises(ConnectError, match="Mongo/db1 connection error") as exc_info:
            await MongoConnector(options).connect(spec)

        assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)
        client.close.assert_awaited_once()


class TestClose:
    """Test closing the primary handle."""

    @pytest.mark.asyncio
    async def test_close_closes_client(self, options, sink):
        client, database = _build_client()

        await MongoConnector(options).close("db1:db1", database)

        client.close.assert_awaited_once()
        sink.info.assert_called_once_with("Mongo/db1:db1 connection closed")

    @pytest.mark.asyncio
    async def test_close_failure_is_logged_not_raised(self, options, sink):
        client, database = _build_client()
        client.close = AsyncMock(side_effect=RuntimeError("socket gone"))

        await MongoConnector(options).close("db1:db1", database)

        sink.error.assert_called_once()
        assert "Mongo/db1:db1 connection close error" in sink.error.call_args[0][0]
        sink.info.assert_not_called()
