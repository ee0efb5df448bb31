"""Unit tests for Account and the shared Resource behaviour."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from recurring import (
    BillingInfo,
    NotFoundError,
    RecurlyError,
    RecurringError,
    Subscription,
    ValidationError,
)
from recurring.models import Account

BASE = "https://api.example.com/v2/"

ACCOUNT_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<account href="{BASE}accounts/a1">
  <adjustments href="{BASE}accounts/a1/adjustments"/>
  <billing_info href="{BASE}accounts/a1/billing_info"/>
  <invoices href="{BASE}accounts/a1/invoices"/>
  <subscriptions href="{BASE}accounts/a1/subscriptions"/>
  <transactions href="{BASE}accounts/a1/transactions"/>
  <account_code>a1</account_code>
  <state>active</state>
  <email>ada@example.com</email>
  <first_name>Ada</first_name>
  <last_name>Lovelace</last_name>
  <company_name nil="nil"></company_name>
  <tax_exempt type="boolean">false</tax_exempt>
  <created_at type="datetime">2011-10-25T12:00:00Z</created_at>
</account>
"""

TAKEN_XML = """<?xml version="1.0" encoding="UTF-8"?>
<errors>
  <error field="account.account_code" symbol="taken">has already been taken</error>
</errors>
"""

SUBSCRIPTIONS_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<subscriptions type="array">
  <subscription href="{BASE}subscriptions/s1">
    <account href="{BASE}accounts/a1"/>
    <uuid>s1</uuid>
    <state>active</state>
  </subscription>
</subscriptions>
"""


class TestResourceInflate:
    """Test how decoded records are merged onto models."""

    def test_inflate_routes_links_and_fields(self, client):
        account = client.account().inflate(
            {
                "href": f"{BASE}accounts/a1",
                "invoices": {"href": f"{BASE}accounts/a1/invoices"},
                "account_code": "a1",
                "company_name": "",
                "vat_number": "GB1",
                "a": [
                    {"name": "close", "href": f"{BASE}accounts/a1", "method": "delete"},
                    {"name": "reopen", "href": f"{BASE}accounts/a1/reopen", "method": "put"},
                ],
            }
        )

        assert account.href == f"{BASE}accounts/a1"
        assert account.account_code == "a1"
        assert account.identifier == "a1"
        assert account.company_name == ""
        assert account.resources == {"invoices": f"{BASE}accounts/a1/invoices"}
        assert "invoices" not in (account.model_extra or {})
        assert account.vat_number == "GB1"
        assert set(account.actions) == {"close", "reopen"}
        assert account.action_href("reopen", "x") == f"{BASE}accounts/a1/reopen"
        assert account.action_href("missing", "fallback") == "fallback"

    def test_inflate_ignores_non_mapping(self, client):
        account = client.account(account_code="a1")
        assert account.inflate(None) is account
        assert account.inflate(["unexpected"]).account_code == "a1"

    def test_set_identifier_computes_href(self, client):
        account = client.account()
        account.set_identifier("a9")
        assert account.account_code == "a9"
        assert account.href == f"{BASE}accounts/a9"

    def test_unbound_resource_raises(self):
        with pytest.raises(RecurringError):
            Account().client

    @pytest.mark.asyncio
    async def test_fetch_without_href_raises(self, client, http):
        with pytest.raises(ValidationError):
            await client.account().fetch()
        http.request.assert_not_called()


class TestAccountCreate:
    """Test account creation and reopening."""

    @pytest.mark.asyncio
    async def test_create(self, client, reply, sent):
        reply((201, ACCOUNT_XML))

        account = await client.account().create({"id": "a1", "email": "ada@example.com"})

        method, uri, kwargs = sent()
        assert (method, uri) == ("POST", f"{BASE}accounts")
        body = kwargs["data"].decode()
        assert "<account_code>a1</account_code>" in body
        assert "<id>" not in body

        assert account.account_code == "a1"
        assert account.created_at == datetime(2011, 10, 25, 12, 0, tzinfo=UTC)
        assert account.tax_exempt is False
        assert account.resources["billing_info"] == f"{BASE}accounts/a1/billing_info"

    @pytest.mark.asyncio
    async def test_create_requires_code(self, client, http):
        with pytest.raises(ValidationError):
            await client.account().create({"email": "x@example.com"})
        http.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_reopens_closed_account(self, client, reply, sent):
        reply((422, TAKEN_XML), (200, ACCOUNT_XML))

        account = await client.account().create({"account_code": "a1"})

        method, uri, _ = sent()
        assert (method, uri) == ("PUT", f"{BASE}accounts/a1/reopen")
        assert account.state == "active"

    @pytest.mark.asyncio
    async def test_create_validation_error(self, client, reply):
        reply(
            (
                422,
                '<errors><error field="account.email" symbol="invalid_email">'
                "is not a valid email</error></errors>",
            )
        )
        with pytest.raises(RecurlyError) as exc_info:
            await client.account().create({"account_code": "a1", "email": "nope"})
        assert exc_info.value.errors[0]["symbol"] == "invalid_email"


class TestAccountOperations:
    """Test operations on an existing account."""

    @pytest.fixture
    def account(self, client):
        return client.account().inflate(
            {"href": f"{BASE}accounts/a1", "account_code": "a1", "email": "old@example.com"}
        )

    @pytest.mark.asyncio
    async def test_fetch(self, account, reply, sent):
        reply((200, ACCOUNT_XML))
        await account.fetch()
        assert sent()[:2] == ("GET", f"{BASE}accounts/a1")
        assert account.first_name == "Ada"

    @pytest.mark.asyncio
    async def test_fetch_missing(self, account, reply):
        reply((404, "<error><symbol>not_found</symbol><description>gone</description></error>"))
        with pytest.raises(NotFoundError, match="gone"):
            await account.fetch()

    @pytest.mark.asyncio
    async def test_update_sends_editable_fields(self, account, reply, sent):
        reply((200, ACCOUNT_XML))
        account.email = "new@example.com"

        await account.update()

        method, uri, kwargs = sent()
        assert (method, uri) == ("PUT", f"{BASE}accounts/a1")
        assert "<email>new@example.com</email>" in kwargs["data"].decode()

    @pytest.mark.asyncio
    async def test_close(self, account, reply, sent):
        reply((204, ""))
        assert await account.close() is True
        assert sent()[:2] == ("DELETE", f"{BASE}accounts/a1")
        assert account.deleted is True

    @pytest.mark.asyncio
    async def test_close_unexpected_status(self, account, reply):
        reply((500, ""))
        with pytest.raises(RecurringError):
            await account.close()
        assert account.deleted is False

    @pytest.mark.asyncio
    async def test_fetch_subscriptions_follows_link(self, client, reply, sent):
        reply((200, ACCOUNT_XML), (200, SUBSCRIPTIONS_XML, {"X-Records": "1"}))
        account = client.account()
        account.set_identifier("a1")
        await account.fetch()

        subscriptions = await account.fetch_subscriptions()

        _, uri, _ = sent()
        assert uri.startswith(f"{BASE}accounts/a1/subscriptions?")
        assert "per_page=200" in uri
        assert len(subscriptions) == 1
        assert isinstance(subscriptions[0], Subscription)
        assert subscriptions[0].account_id == "a1"
        assert account.subscriptions == subscriptions

    @pytest.mark.asyncio
    async def test_fetch_billing_info(self, account, reply, sent):
        reply(
            (
                200,
                f'<billing_info href="{BASE}accounts/a1/billing_info">'
                "<first_name>Ada</first_name><last_four>1111</last_four></billing_info>",
            )
        )
        info = await account.fetch_billing_info()

        assert sent()[:2] == ("GET", f"{BASE}accounts/a1/billing_info")
        assert isinstance(info, BillingInfo)
        assert info.last_four == "1111"

    @pytest.mark.asyncio
    async def test_create_adjustment(self, account, reply, sent):
        reply(
            (
                201,
                '<adjustment><uuid>adj1</uuid><type>charge</type>'
                '<unit_amount_in_cents type="integer">500</unit_amount_in_cents></adjustment>',
            )
        )
        adjustment = await account.create_adjustment(
            {"currency": "USD", "unit_amount_in_cents": 500}
        )

        assert sent()[:2] == ("POST", f"{BASE}accounts/a1/adjustments")
        assert adjustment.uuid == "adj1"
        assert adjustment.unit_amount_in_cents == 500

    @pytest.mark.asyncio
    async def test_all_keyed_by_code(self, client, reply):
        reply(
            (
                200,
                '<accounts type="array">'
                "<account><account_code>a1</account_code></account>"
                "<account><account_code>a2</account_code></account>"
                "</accounts>",
                {"X-Records": "2"},
            )
        )
        accounts = await client.account().all({"state": "active"})
        assert set(accounts) == {"a1", "a2"}
        assert all(isinstance(a, Account) for a in accounts.values())

    @pytest.mark.asyncio
    async def test_non_enumerable_all_raises(self, client):
        with pytest.raises(RecurringError):
            await client.billing_info().all()
