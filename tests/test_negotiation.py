"""Unit tests for the connection negotiation hooks."""

from types import SimpleNamespace

import pytest

from core.domain.models import FailureClassification, RequestOptions
from core.services.negotiation import (
    PASSWORD_NOT_PROVIDED,
    WRONG_PASSWORD,
    ConnectionNegotiator,
)
from core.services.notices import NoPasswordNotice
from tests.conftest import FakeDevice, FakeStore, RecordingConsole


def _response(status_code: int) -> SimpleNamespace:
    return SimpleNamespace(status_code=status_code)


@pytest.mark.unit
class TestPrepare:
    @pytest.mark.asyncio
    async def test_session_options_from_stores(self, negotiator: ConnectionNegotiator) -> None:
        options = await negotiator.prepare(False)

        assert options.ip == "10.0.0.5"
        assert options.port == 8443
        assert options.ssl is True
        assert options.password == "secret"
        assert options.timer is None

    @pytest.mark.asyncio
    async def test_missing_password_becomes_empty(
        self, negotiator: ConnectionNegotiator, auth_store: FakeStore
    ) -> None:
        auth_store.values.clear()
        options = await negotiator.prepare(False)
        assert options.password == ""

    @pytest.mark.asyncio
    async def test_no_session_skips_device_and_password(
        self, negotiator: ConnectionNegotiator, device: FakeDevice
    ) -> None:
        options = await negotiator.prepare(True)

        assert device.calls == 0
        assert options.password is None
        assert options.no_session is True
        assert options.port == 8443

    @pytest.mark.asyncio
    async def test_explicit_port_and_http(
        self, negotiator: ConnectionNegotiator, config_store: FakeStore
    ) -> None:
        config_store.values.update(port=9000, useHttp=True)
        options = await negotiator.prepare(True)
        assert (options.port, options.ssl) == (9000, False)

    @pytest.mark.asyncio
    async def test_no_password_warning_once(
        self, negotiator: ConnectionNegotiator, device: FakeDevice, console: RecordingConsole
    ) -> None:
        device.no_password = True

        await negotiator.prepare(False)
        await negotiator.prepare(False)

        assert device.calls == 1
        assert console.text.count("A password was not set for the microcontroller") == 1

    @pytest.mark.asyncio
    async def test_no_warning_when_password_set(
        self, negotiator: ConnectionNegotiator, device: FakeDevice, console: RecordingConsole
    ) -> None:
        await negotiator.prepare(False)
        assert device.calls == 1
        assert "password was not set" not in console.text

    @pytest.mark.asyncio
    async def test_notice_shared_between_negotiators(
        self, config_store: FakeStore, auth_store: FakeStore, console: RecordingConsole
    ) -> None:
        notice = NoPasswordNotice(console)
        device = FakeDevice(no_password=True)
        for _ in range(2):
            negotiator = ConnectionNegotiator(
                config=config_store,
                auth=auth_store,
                device=device,
                no_password_notice=notice,
                console=console,
            )
            await negotiator.before_all(RequestOptions())

        assert device.calls == 1
        assert console.text.count("password was not set") == 1

    @pytest.mark.asyncio
    async def test_unbound_device_raises(
        self, config_store: FakeStore, auth_store: FakeStore, console: RecordingConsole
    ) -> None:
        negotiator = ConnectionNegotiator(
            config=config_store,
            auth=auth_store,
            no_password_notice=NoPasswordNotice(console),
            console=console,
        )
        with pytest.raises(RuntimeError):
            await negotiator.prepare(False)


@pytest.mark.unit
class TestAttemptTimer:
    @pytest.mark.asyncio
    async def test_before_each_attempt_arms_notice(self, negotiator: ConnectionNegotiator) -> None:
        options = await negotiator.before_each_attempt(await negotiator.prepare(False))

        assert options.timer is not None
        assert options.timer.armed
        assert options.timer.url == "https://10.0.0.5:8443"
        options.release_timer()

    @pytest.mark.asyncio
    async def test_on_success_clears_notice(self, negotiator: ConnectionNegotiator) -> None:
        options = await negotiator.before_each_attempt(await negotiator.prepare(False))
        timer = options.timer

        await negotiator.on_success(options)

        assert options.timer is None
        assert timer is not None and not timer.armed
        options.release_timer()

    @pytest.mark.asyncio
    async def test_on_failure_clears_notice(self, negotiator: ConnectionNegotiator) -> None:
        options = await negotiator.before_each_attempt(await negotiator.prepare(False))

        await negotiator.on_failure(options, RuntimeError("boom"), _response(500))

        assert options.timer is None


@pytest.mark.unit
class TestOnSuccess:
    @pytest.mark.asyncio
    async def test_persists_default_port_as_unset(
        self, negotiator: ConnectionNegotiator, config_store: FakeStore, auth_store: FakeStore
    ) -> None:
        config_store.values["port"] = 8443
        options = await negotiator.prepare(False)

        await negotiator.on_success(options)

        assert "port" not in config_store.values
        assert ("port", None) in config_store.writes
        assert config_store.values["useHttp"] is False
        assert auth_store.values["password"] == "secret"

    @pytest.mark.asyncio
    async def test_persists_explicit_port(
        self, negotiator: ConnectionNegotiator, config_store: FakeStore
    ) -> None:
        options = RequestOptions(ip="192.168.1.9", port=8000, ssl=True)
        await negotiator.on_success(options)

        assert config_store.values == {"ip": "192.168.1.9", "port": 8000, "useHttp": False}

    @pytest.mark.asyncio
    async def test_http_default_port_is_unset(
        self, negotiator: ConnectionNegotiator, config_store: FakeStore
    ) -> None:
        await negotiator.on_success(RequestOptions(ip="10.0.0.5", port=8000, ssl=False))

        assert config_store.values == {"ip": "10.0.0.5", "useHttp": True}

    @pytest.mark.parametrize("port,ssl", [(8443, True), (8000, False), (8000, True), (9999, False)])
    @pytest.mark.asyncio
    async def test_round_trip_through_prepare(
        self, negotiator: ConnectionNegotiator, port: int, ssl: bool
    ) -> None:
        await negotiator.on_success(RequestOptions(ip="10.0.0.5", port=port, ssl=ssl))
        options = await negotiator.prepare(True)

        assert (options.port, options.ssl) == (port, ssl)

    @pytest.mark.asyncio
    async def test_no_session_does_not_write_password(
        self, negotiator: ConnectionNegotiator, auth_store: FakeStore
    ) -> None:
        await negotiator.on_success(await negotiator.prepare(True))
        assert auth_store.writes == []

    @pytest.mark.asyncio
    async def test_empty_password_is_written(
        self, negotiator: ConnectionNegotiator, auth_store: FakeStore
    ) -> None:
        await negotiator.on_success(RequestOptions(ip="10.0.0.5", port=8443, password=""))
        assert auth_store.writes == [("password", "")]


@pytest.mark.unit
class TestOnFailure:
    @pytest.mark.asyncio
    async def test_connection_error_reprompts_connection(
        self,
        negotiator: ConnectionNegotiator,
        config_store: FakeStore,
        auth_store: FakeStore,
        console: RecordingConsole,
    ) -> None:
        options = await negotiator.prepare(False)
        config_store.answers.extend(["10.0.0.7", 9000, True])

        retry = await negotiator.on_failure(options, OSError("unreachable"), None)

        assert "cannot be reached" in console.text
        assert "10.0.0.5 8443 ssl: True" in console.text
        assert [name for name, _ in config_store.prompts] == ["ip", "port", "useHttp"]
        assert retry is not None
        assert (retry.ip, retry.port, retry.ssl) == ("10.0.0.7", 9000, False)
        assert retry.password == "secret"
        # Nothing persisted until a later success.
        assert config_store.writes == []
        assert auth_store.writes == []
        assert auth_store.prompts == []

    @pytest.mark.asyncio
    async def test_connection_error_blank_port_uses_protocol_default(
        self, negotiator: ConnectionNegotiator, config_store: FakeStore
    ) -> None:
        options = await negotiator.prepare(False)
        config_store.answers.extend(["10.0.0.7", None, True])

        retry = await negotiator.on_failure(options, OSError("unreachable"), None)

        assert retry is not None
        assert retry.port == 8000

    @pytest.mark.asyncio
    async def test_forbidden_with_empty_stored_password(
        self, negotiator: ConnectionNegotiator, config_store: FakeStore, auth_store: FakeStore
    ) -> None:
        auth_store.values["password"] = ""
        options = await negotiator.prepare(False)
        auth_store.answers.append("hunter2")

        retry = await negotiator.on_failure(options, RuntimeError("401"), _response(401))

        assert auth_store.prompts == [("password", PASSWORD_NOT_PROVIDED)]
        assert retry is not None
        assert retry.password == "hunter2"
        assert (retry.ip, retry.port, retry.ssl) == ("10.0.0.5", 8443, True)
        # Connection was fine: persisted immediately.
        assert config_store.values["ip"] == "10.0.0.5"
        assert ("useHttp", False) in config_store.writes
        assert auth_store.writes == []

    @pytest.mark.asyncio
    async def test_forbidden_with_missing_stored_password(
        self, negotiator: ConnectionNegotiator, auth_store: FakeStore
    ) -> None:
        auth_store.values.clear()
        options = await negotiator.prepare(False)
        auth_store.answers.append(None)

        retry = await negotiator.on_failure(options, RuntimeError("401"), _response(401))

        assert auth_store.prompts == [("password", PASSWORD_NOT_PROVIDED)]
        assert retry is not None and retry.password == ""

    @pytest.mark.asyncio
    async def test_forbidden_with_wrong_stored_password(
        self, negotiator: ConnectionNegotiator, auth_store: FakeStore
    ) -> None:
        options = await negotiator.prepare(False)
        auth_store.answers.append("right")

        retry = await negotiator.on_failure(options, RuntimeError("401"), _response(401))

        assert auth_store.prompts == [("password", WRONG_PASSWORD)]
        assert retry is not None and retry.password == "right"

    @pytest.mark.asyncio
    async def test_other_error_persists_and_stops(
        self, negotiator: ConnectionNegotiator, config_store: FakeStore, auth_store: FakeStore
    ) -> None:
        config_store.values["port"] = 9000
        options = await negotiator.prepare(False)

        retry = await negotiator.on_failure(options, RuntimeError("500"), _response(500))

        assert retry is None
        assert config_store.values == {"ip": "10.0.0.5", "port": 9000, "useHttp": False}
        assert auth_store.writes == [("password", "secret")]
        assert config_store.prompts == []
        assert auth_store.prompts == []


@pytest.mark.unit
class TestReconfigure:
    @pytest.mark.asyncio
    async def test_connection_branch_wins_over_forbidden(
        self, negotiator: ConnectionNegotiator, config_store: FakeStore, auth_store: FakeStore
    ) -> None:
        """Both causes at once: only the connection is asked for and nothing is saved."""

        options = await negotiator.prepare(False)
        config_store.answers.extend(["10.0.0.8", None, False])

        retry = await negotiator.reconfigure(
            options, FailureClassification(is_connection_error=True, is_forbidden=True)
        )

        assert retry is not None
        assert (retry.ip, retry.port, retry.ssl, retry.password) == ("10.0.0.8", 8443, True, "secret")
        assert auth_store.prompts == []
        assert config_store.writes == []
        assert auth_store.writes == []

    def test_classification(self) -> None:
        assert FailureClassification.from_status(None) == FailureClassification(True, False)
        assert FailureClassification.from_status(401) == FailureClassification(False, True)
        assert FailureClassification.from_status(403) == FailureClassification(False, False)
        assert FailureClassification.from_status(500) == FailureClassification(False, False)
