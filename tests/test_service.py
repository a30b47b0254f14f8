"""
Tests for the DataGuard service, directory loading, audit logging,
configuration and error types.
"""

import json
import logging

import pytest
import pytest_asyncio

from dataguard import Config, DataGuard, Decision, RoleDirectory
from dataguard.audit import (
    AuditEvent,
    FileAuditLogger,
    MemoryAuditLogger,
    NullAuditLogger,
    create_audit_logger,
)
from dataguard.authz import Grant, GrantResources, Role, User
from dataguard.common.messages import EventTypes
from dataguard.demo.main import DEMO_DIRECTORY, main
from dataguard.types import (
    ConfigurationError,
    DirectoryError,
    ErrorCode,
    UnknownUserError,
    ValidationError,
    create_error_response,
    get_http_status,
)
from dataguard.types.errors import ERROR_CODE_TO_HTTP_STATUS
from dataguard.util import load_config_file, save_config_file

from builders import build_request


DIRECTORY_DATA = {
    "users": {
        "Alice": {"roles": ["reader"]},
        "dana": {"roles": ["writer", "reader"]},
    },
    "roles": {
        "reader": {"grants": [{"actions": ["SELECT"], "resources": {"data_source": "aurora"}}]},
        "Writer": {"grants": [{"actions": ["INSERT"], "resources": {"tables": ["staging_*"]}}]},
    },
}


@pytest.fixture
def config():
    """Create a test configuration"""
    return Config(audit_logger="memory", audit_max_entries=50)


@pytest.fixture
def directory_file(tmp_path):
    path = tmp_path / "directory.yaml"
    save_config_file(DIRECTORY_DATA, str(path))
    return path


@pytest_asyncio.fixture
async def guard(config):
    """Create a DataGuard instance for testing"""
    instance = DataGuard.new(config, directory=RoleDirectory.from_dict(DIRECTORY_DATA))
    yield instance
    await instance.close()


class TestDataGuard:
    """Test the audited decision service"""

    @pytest.mark.asyncio
    async def test_evaluate_records_decision(self, guard):
        result = await guard.evaluate(build_request(table="orders", instance="inst-a", columns=["id"]))
        assert result.decision is Decision.ALLOWED

        events = await guard.audit_logger.get_events(event_type=EventTypes.ACCESS_DECISION)
        assert len(events) == 1
        event = events[0]
        assert event.user_id == "alice"
        assert event.decision == "Allowed"
        assert event.resource == "aurora:inst-a.orders"
        assert event.details["reason"] == "access_granted"
        assert event.details["columns"] == ["id"]

    @pytest.mark.asyncio
    async def test_authorize_returns_output_contract(self, guard):
        response = await guard.authorize(build_request(user_id="bob"))
        assert response == {"Decision": "Indeterminate", "Message": "user does not exist"}

    @pytest.mark.asyncio
    async def test_audit_filtering(self, guard):
        await guard.authorize(build_request())
        await guard.authorize(build_request(method="POST"))
        await guard.authorize(build_request(user_id="dana", data_source="s3"))

        denied = await guard.audit_logger.get_events(decision="Denied")
        assert len(denied) == 2
        dana = await guard.audit_logger.get_events(user_id="DANA")
        assert [event.resource for event in dana] == ["s3"]

    @pytest.mark.asyncio
    async def test_malformed_request_is_audited(self, guard):
        response = await guard.authorize({"user_id": 7})
        assert response["Decision"] == "Indeterminate"
        events = await guard.audit_logger.get_events()
        assert events[0].resource is None
        assert events[0].details["reason"] == "missing_fields"

    @pytest.mark.asyncio
    async def test_reload(self, directory_file):
        guard = DataGuard.new(Config(directory_path=str(directory_file)))
        assert guard.directory.has_user("dana")

        save_config_file({"users": {"erin": {"roles": []}}, "roles": {}}, str(directory_file))
        old = guard.directory
        directory = await guard.reload()

        assert guard.directory is directory
        assert directory.has_user("erin")
        assert not directory.has_user("dana")
        assert old.has_user("dana")

        events = await guard.audit_logger.get_events(event_type=EventTypes.DIRECTORY_LOADED)
        assert events[0].details == {"users": 1, "roles": 0}
        await guard.close()

    @pytest.mark.asyncio
    async def test_failed_reload_keeps_snapshot(self, directory_file):
        guard = DataGuard.new(Config(directory_path=str(directory_file)))
        directory_file.write_text("users: [not, a, mapping]\n", encoding="utf-8")

        with pytest.raises(DirectoryError):
            await guard.reload()
        assert guard.directory.has_user("alice")
        await guard.close()

    @pytest.mark.asyncio
    async def test_reload_without_path(self, config):
        guard = DataGuard(config, directory=RoleDirectory())
        with pytest.raises(ConfigurationError):
            await guard.reload()
        await guard.close()

    def test_new_with_missing_directory_file(self, tmp_path):
        with pytest.raises(DirectoryError) as exc_info:
            DataGuard.new(Config(directory_path=str(tmp_path / "missing.yaml")))
        assert exc_info.value.error_code is ErrorCode.DIRECTORY_ERROR

    def test_new_validates_config(self):
        with pytest.raises(ConfigurationError):
            DataGuard.new(Config(audit_logger="syslog"))

    @pytest.mark.asyncio
    async def test_without_directory_everyone_is_unknown(self, config, caplog):
        with caplog.at_level(logging.WARNING):
            guard = DataGuard(config)
        assert "No directory supplied" in caplog.text
        response = await guard.authorize(build_request())
        assert response["Message"] == "user does not exist"
        await guard.close()

    @pytest.mark.asyncio
    async def test_demo_runs(self, capsys):
        assert await main() == 0
        assert "Demo completed successfully!" in capsys.readouterr().out


class TestRoleDirectory:
    """Test directory snapshots"""

    def test_case_insensitive_lookup(self):
        directory = RoleDirectory.from_dict(DIRECTORY_DATA)
        assert directory.has_user("ALICE")
        assert directory.get_role("writer") is not None
        assert not directory.has_user("")
        assert not directory.has_user(None)

    def test_grants_union(self):
        directory = RoleDirectory.from_dict(DIRECTORY_DATA)
        grants = directory.grants_for("dana")
        assert {grant.actions for grant in grants} == {("SELECT",), ("INSERT",)}

    def test_unknown_user(self):
        directory = RoleDirectory.from_dict(DIRECTORY_DATA)
        with pytest.raises(UnknownUserError) as exc_info:
            directory.grants_for("bob")
        assert exc_info.value.error_code is ErrorCode.NOT_FOUND
        assert exc_info.value.details["user_id"] == "bob"

    def test_from_file(self, directory_file):
        directory = RoleDirectory.from_file(str(directory_file))
        assert len(directory) == 2
        assert repr(directory) == "RoleDirectory(users=2, roles=2)"

    def test_round_trip_through_dict(self):
        directory = RoleDirectory.from_dict(DIRECTORY_DATA)
        again = RoleDirectory.from_dict(directory.to_dict())
        assert again.grants_for("dana") == directory.grants_for("dana")

    def test_grant_fields_are_optional(self):
        directory = RoleDirectory.from_dict({
            "users": {"alice": {"roles": ["any"]}},
            "roles": {"any": {"grants": [{"actions": ["*"]}]}},
        })
        (grant,) = directory.grants_for("alice")
        assert grant == Grant(actions=("*",), resources=GrantResources())

    @pytest.mark.parametrize("data", [
        [],
        {"users": ["alice"]},
        {"roles": "reader"},
        {"users": {"alice": {"roles": "reader"}}},
        {"roles": {"reader": {"grants": [{"actions": "SELECT"}]}}},
        {"roles": {"reader": {"grants": [{"actions": ["SELECT"], "resources": {"tables": "orders"}}]}}},
        {"roles": {"reader": {"grants": [{"actions": ["SELECT"], "resources": {"columns_by_table": [{}]}}]}}},
    ])
    def test_corrupt_data(self, data):
        with pytest.raises(DirectoryError):
            RoleDirectory.from_dict(data, source="test")

    @pytest.mark.parametrize("data,kind,ids", [
        ({"users": {"alice": {"roles": ["reader"]}, "Alice": {"roles": []}},
          "roles": DIRECTORY_DATA["roles"]}, "user", ["alice", "Alice"]),
        ({"users": {"alice": {"roles": ["reader"]}},
          "roles": {"reader": {"grants": [{"actions": ["SELECT"]}]}, "READER": {"grants": []}}},
         "role", ["reader", "READER"]),
    ])
    def test_case_colliding_ids(self, data, kind, ids):
        with pytest.raises(DirectoryError) as exc_info:
            RoleDirectory.from_dict(data, source="directory.yaml")
        assert exc_info.value.details == {"kind": kind, "ids": ids, "source": "directory.yaml"}

    def test_case_colliding_ids_on_direct_construction(self):
        with pytest.raises(DirectoryError):
            RoleDirectory(users=[User(id="dana"), User(id="DANA", roles=("reader",))])
        with pytest.raises(DirectoryError):
            RoleDirectory(roles=[Role(id="writer"), Role(id="Writer")])

    def test_dangling_roles_warn(self, caplog):
        data = {"users": {"alice": {"roles": ["reader", "ghost"]}}, "roles": DIRECTORY_DATA["roles"]}
        with caplog.at_level(logging.WARNING):
            directory = RoleDirectory.from_dict(data)
        assert "ghost" in caplog.text
        assert directory.dangling_roles() == {"alice": frozenset({"ghost"})}
        assert len(directory.grants_for("alice")) == 1

    def test_dangling_roles_strict(self):
        data = {"users": {"alice": {"roles": ["ghost"]}}, "roles": {}}
        with pytest.raises(DirectoryError) as exc_info:
            RoleDirectory.from_dict(data, strict=True)
        assert exc_info.value.details["alice"] == ["ghost"]

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "directory.yaml"
        path.write_text("users: {alice: [unclosed\n", encoding="utf-8")
        with pytest.raises(DirectoryError) as exc_info:
            RoleDirectory.from_file(str(path))
        assert exc_info.value.details["path"] == str(path)

    def test_demo_directory_loads(self):
        directory = RoleDirectory.from_dict(DEMO_DIRECTORY, strict=True)
        assert directory.has_user("carol")


class TestAuditLoggers:
    """Test audit logger implementations"""

    @pytest.mark.asyncio
    async def test_memory_logger_bounded(self):
        audit = MemoryAuditLogger(max_entries=2)
        for user in ("a", "b", "c"):
            await audit.log(AuditEvent(event_id="", event_type=EventTypes.ACCESS_DECISION, user_id=user))
        events = await audit.get_events()
        assert [event.user_id for event in events] == ["b", "c"]
        assert all(event.event_id for event in events)

    @pytest.mark.asyncio
    async def test_file_logger(self, tmp_path):
        path = tmp_path / "audit.log"
        audit = FileAuditLogger(str(path))
        assert await audit.get_events() == []

        await audit.log(AuditEvent(event_id="1", event_type=EventTypes.ACCESS_DECISION,
                                   user_id="alice", decision="Allowed", resource="aurora"))
        await audit.log(AuditEvent(event_id="2", event_type=EventTypes.ACCESS_DECISION,
                                   user_id="bob", decision="Indeterminate"))
        with open(path, "a", encoding="utf-8") as f:
            f.write("not json\n")

        events = await audit.get_events()
        assert [event.event_id for event in events] == ["1", "2"]
        allowed = await audit.get_events(decision="Allowed")
        assert allowed[0].resource == "aurora"

        first = json.loads(path.read_text(encoding="utf-8").splitlines()[0])
        assert first["user_id"] == "alice"

    @pytest.mark.asyncio
    async def test_null_logger(self):
        audit = NullAuditLogger()
        await audit.log(AuditEvent(event_id="1", event_type=EventTypes.ACCESS_DECISION))
        assert await audit.get_events() == []

    def test_factory(self, tmp_path):
        assert isinstance(create_audit_logger("memory", max_entries=5), MemoryAuditLogger)
        assert isinstance(create_audit_logger("file", file_path=str(tmp_path / "a.log")), FileAuditLogger)
        assert isinstance(create_audit_logger("none"), NullAuditLogger)
        with pytest.raises(ValueError):
            create_audit_logger("syslog")


class TestConfig:
    """Test configuration loading and validation"""

    def test_defaults_are_valid(self):
        config = Config()
        assert config.validate()
        assert config.log_level_value == logging.INFO

    @pytest.mark.parametrize("overrides", [
        {"audit_logger": "syslog"},
        {"audit_logger": "file", "audit_log_path": ""},
        {"audit_max_entries": 0},
        {"log_level": "LOUD"},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ConfigurationError):
            Config(**overrides).validate()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DATAGUARD_DIRECTORY_PATH", "/etc/dataguard/directory.yaml")
        monkeypatch.setenv("DATAGUARD_STRICT_DIRECTORY", "yes")
        monkeypatch.setenv("DATAGUARD_AUDIT_MAX_ENTRIES", "25")
        config = Config.from_env()
        assert config.directory_path == "/etc/dataguard/directory.yaml"
        assert config.strict_directory is True
        assert config.audit_max_entries == 25
        assert config.audit_logger == "memory"

    def test_from_file(self, tmp_path):
        path = tmp_path / "dataguard.yml"
        path.write_text("audit-logger: file\nlog-level: DEBUG\nunknown: 1\n", encoding="utf-8")
        config = Config.from_file(str(path), overrides={"log_level": "WARNING"})
        assert config.audit_logger == "file"
        assert config.log_level == "WARNING"

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Config.from_file(str(tmp_path / "absent.json"))

    def test_config_file_formats(self, tmp_path):
        path = tmp_path / "settings.json"
        save_config_file({"audit_max_entries": 10}, str(path))
        assert load_config_file(str(path)) == {"audit_max_entries": 10}
        with pytest.raises(ValueError):
            save_config_file({}, str(tmp_path / "settings.toml"))


class TestErrors:
    """Test error types"""

    def test_error_response(self):
        error = ConfigurationError("bad value", config_key="log_level", config_value="LOUD")
        assert str(error) == "configuration_error: bad value"
        response = create_error_response(error)
        assert response["http_status"] == 500
        assert response["details"] == {"config_key": "log_level", "config_value": "LOUD"}

    def test_every_error_code_has_a_status(self):
        assert set(ERROR_CODE_TO_HTTP_STATUS) == set(ErrorCode)
        assert get_http_status(ErrorCode.NOT_FOUND) == 404

    def test_directory_error_keeps_cause(self):
        cause = ValidationError("actions must be a list of strings", field="actions", value="SELECT")
        error = DirectoryError("corrupt", path="d.yaml", cause=cause)
        data = error.to_dict()
        assert data["error"] == "directory_error"
        assert data["details"]["path"] == "d.yaml"
        assert "actions must be" in data["cause"]
