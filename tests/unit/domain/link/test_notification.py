"""Tests for WelcomeMailService."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from idlink.config import BrandConfig
from idlink.domain.link.model.link import Link
from idlink.domain.link.port.mail import MailReceipt
from idlink.domain.link.service.notification import (
    LINK_CATEGORIES,
    LINK_TEMPLATE,
    WelcomeMailService,
)
from idlink.domain.shared.error import NotificationError


def _make_link(*, service_account: bool = False) -> Link:
    return Link(
        github_id="1001",
        github_login="octocat",
        github_token="gho_secret",
        aad_id="aad-1",
        aad_upn="octo@contoso.com",
        aad_name="Octo Cat",
        is_service_account=service_account,
        service_account_mail="ops@example.com" if service_account else None,
        created_at=datetime.now(UTC),
    )


def _make_transport() -> MagicMock:
    transport = MagicMock()
    transport.name = "fake"
    transport.send = AsyncMock(return_value=MailReceipt(transport="fake", message_id="m-1"))
    return transport


def _make_service(
    transport: MagicMock | None = None,
    *,
    operations_email: str | None = "operations@contoso.com",
) -> tuple[WelcomeMailService, AsyncMock]:
    renderer = AsyncMock()
    renderer.render.return_value = "<html>welcome</html>"
    service = WelcomeMailService(
        _renderer=renderer,
        _brand=BrandConfig(company_name="Contoso", operations_email=operations_email),
        _transport=transport,
    )
    return service, renderer


class TestRecipients:
    def test_operations_copied_for_service_accounts(self):
        service, _ = _make_service(_make_transport())

        to, cc = service.recipients(_make_link(service_account=True), "octo@contoso.com")

        assert to == ("octo@contoso.com",)
        assert cc == ("operations@contoso.com",)

    def test_operations_not_copied_for_people(self):
        service, _ = _make_service(_make_transport())

        _, cc = service.recipients(_make_link(), "octo@contoso.com")

        assert cc == ()

    def test_no_cc_without_operations_address(self):
        service, _ = _make_service(_make_transport(), operations_email=None)

        _, cc = service.recipients(_make_link(service_account=True), "octo@contoso.com")

        assert cc == ()


class TestSendWelcome:
    @pytest.mark.asyncio
    async def test_sends_rendered_mail(self):
        transport = _make_transport()
        service, renderer = _make_service(transport)

        receipt = await service.send_welcome(_make_link(), "octo@contoso.com", "corr-1")

        assert receipt is not None
        assert receipt.message_id == "m-1"
        template, options = renderer.render.await_args.args
        assert template == LINK_TEMPLATE
        assert options["headline"] == "Welcome to GitHub, octocat"
        assert options["app"] == "Contoso GitHub"
        assert "octo@contoso.com" in options["reason"]
        assert "github_token" not in options["link"]

        mail = transport.send.await_args.args[0]
        assert mail.to == ("octo@contoso.com",)
        assert mail.subject == "octo@contoso.com linked to octocat"
        assert mail.content == "<html>welcome</html>"
        assert mail.categories == LINK_CATEGORIES
        assert mail.correlation_id == "corr-1"

    @pytest.mark.asyncio
    async def test_service_account_mail_copies_operations(self):
        transport = _make_transport()
        service, _ = _make_service(transport)

        await service.send_welcome(_make_link(service_account=True), "octo@contoso.com")

        mail = transport.send.await_args.args[0]
        assert mail.cc == ("operations@contoso.com",)

    @pytest.mark.asyncio
    async def test_skipped_without_transport(self):
        service, renderer = _make_service(None)

        assert await service.send_welcome(_make_link(), "octo@contoso.com") is None
        renderer.render.assert_not_called()

    @pytest.mark.asyncio
    async def test_skipped_without_recipient(self):
        transport = _make_transport()
        service, renderer = _make_service(transport)

        assert await service.send_welcome(_make_link(), None) is None
        renderer.render.assert_not_called()
        transport.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_render_failure_is_swallowed(self):
        transport = _make_transport()
        service, renderer = _make_service(transport)
        renderer.render.side_effect = NotificationError("bad template")

        assert await service.send_welcome(_make_link(), "octo@contoso.com") is None
        transport.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_failure_is_swallowed(self):
        transport = _make_transport()
        transport.send.side_effect = NotificationError("smtp down")
        service, _ = _make_service(transport)

        assert await service.send_welcome(_make_link(), "octo@contoso.com") is None
