"""Tests for the SQL-backed credential provider."""

import pytest
from sqlalchemy.exc import OperationalError

from src.portal.core.errors import AuthenticationError, NotificationError, ProvisioningError
from src.portal.providers import SQLCredentialProvider
from src.portal.providers import credentials as credentials_module
from src.portal.repositories import CredentialRepository

pytestmark = pytest.mark.integration

PASSWORD = "correct-horse-battery-staple"


@pytest.fixture
def provider(db_session) -> SQLCredentialProvider:
    return SQLCredentialProvider(CredentialRepository(db_session), db_session)


@pytest.fixture
def sent_emails(monkeypatch) -> list[dict]:
    """Capture credential-reset emails instead of sending them."""
    sent: list[dict] = []

    def fake_send(to: str, token: str, user_name: str) -> bool:
        sent.append({"to": to, "token": token, "user_name": user_name})
        return True

    monkeypatch.setattr(credentials_module, "send_credential_reset_email", fake_send)
    return sent


class TestCreateIdentity:
    async def test_create_normalizes_email(self, provider):
        identity = await provider.create_identity("  Kojo@Test.com ", PASSWORD)

        assert identity.email == "kojo@test.com"
        assert identity.email_verified is False

    async def test_create_does_not_sign_in(self, provider):
        seen = []

        async def listener(identity):
            seen.append(identity)

        provider.on_identity_changed(listener)
        await provider.create_identity("kojo@test.com", PASSWORD)

        assert seen == []
        assert provider.current_identity is None

    async def test_duplicate_email_rejected(self, provider):
        await provider.create_identity("kojo@test.com", PASSWORD)

        with pytest.raises(ProvisioningError, match="already registered"):
            await provider.create_identity("KOJO@test.com", "another-long-secret")

    async def test_update_display_name(self, provider):
        identity = await provider.create_identity("kojo@test.com", PASSWORD)

        updated = await provider.update_display_name(identity, "Kojo")

        assert updated.display_name == "Kojo"
        assert (await provider.get_identity(identity.id)).display_name == "Kojo"


class TestSignIn:
    async def test_sign_in_notifies_listeners(self, provider):
        created = await provider.create_identity("kojo@test.com", PASSWORD)
        seen = []

        async def listener(identity):
            seen.append(identity)

        provider.on_identity_changed(listener)
        identity = await provider.sign_in("kojo@test.com", PASSWORD)

        assert identity.id == created.id
        assert seen == [identity]
        assert provider.current_identity == identity

        await provider.sign_out()
        assert seen[-1] is None
        assert provider.current_identity is None

    async def test_wrong_password(self, provider):
        await provider.create_identity("kojo@test.com", PASSWORD)

        with pytest.raises(AuthenticationError):
            await provider.sign_in("kojo@test.com", "wrong-password")

    async def test_unknown_email(self, provider):
        with pytest.raises(AuthenticationError):
            await provider.sign_in("nobody@test.com", PASSWORD)

    async def test_inactive_identity(self, provider, db_session):
        identity = await provider.create_identity("kojo@test.com", PASSWORD)
        record = await CredentialRepository(db_session).get_by_id(identity.id)
        record.is_active = False
        await db_session.commit()

        with pytest.raises(AuthenticationError):
            await provider.sign_in("kojo@test.com", PASSWORD)
        assert await provider.get_identity(identity.id) is None


class TestCredentialReset:
    async def test_reset_roundtrip(self, provider, sent_emails):
        identity = await provider.create_identity("kojo@test.com", "temporary-secret-Ab1!")
        await provider.update_display_name(identity, "Kojo")

        await provider.send_credential_reset("kojo@test.com")

        assert len(sent_emails) == 1
        assert sent_emails[0]["to"] == "kojo@test.com"
        assert sent_emails[0]["user_name"] == "Kojo"

        confirmed = await provider.confirm_credential_reset(sent_emails[0]["token"], PASSWORD)
        assert confirmed.email_verified is True

        signed_in = await provider.sign_in("kojo@test.com", PASSWORD)
        assert signed_in.id == identity.id

    async def test_reset_token_single_use(self, provider, sent_emails):
        await provider.create_identity("kojo@test.com", "temporary-secret-Ab1!")
        await provider.send_credential_reset("kojo@test.com")
        token = sent_emails[0]["token"]
        await provider.confirm_credential_reset(token, PASSWORD)

        with pytest.raises(AuthenticationError):
            await provider.confirm_credential_reset(token, "another-strong-passphrase")

    async def test_invalid_token(self, provider):
        with pytest.raises(AuthenticationError):
            await provider.confirm_credential_reset("not-a-token", PASSWORD)

    async def test_unknown_email(self, provider, sent_emails):
        with pytest.raises(NotificationError):
            await provider.send_credential_reset("nobody@test.com")
        assert sent_emails == []

    async def test_delivery_failure(self, provider, monkeypatch):
        monkeypatch.setattr(
            credentials_module, "send_credential_reset_email", lambda *args: False
        )
        await provider.create_identity("kojo@test.com", PASSWORD)

        with pytest.raises(NotificationError):
            await provider.send_credential_reset("kojo@test.com")

    async def test_token_store_failure_is_notification_error(
        self, provider, db_session, sent_emails, monkeypatch
    ):
        await provider.create_identity("kojo@test.com", PASSWORD)

        async def failing_commit():
            raise OperationalError("UPDATE credentials", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(NotificationError):
            await provider.send_credential_reset("kojo@test.com")
        assert sent_emails == []
