"""
Unit tests for activation emails.
"""

from unittest.mock import AsyncMock, patch

import pytest

from supchaissac.core.email import (
    activation_link,
    is_academic_email,
    render_activation_email,
    send_activation_email,
)


class TestIsAcademicEmail:
    """Tests for the academic domain allow-list."""

    @pytest.mark.parametrize(
        "email",
        [
            "jean.dupont@ac-nantes.fr",
            "JEAN.DUPONT@AC-LYON.FR",
            "direction@education.gouv.fr",
            "prof@sub.ac-paris.fr",
        ],
    )
    def test_accepted(self, email):
        assert is_academic_email(email) is True

    @pytest.mark.parametrize(
        "email",
        ["jean@gmail.com", "jean@fake-ac-nantes.fr", "no-at-sign", "jean@"],
    )
    def test_rejected(self, email):
        assert is_academic_email(email) is False


class TestRenderActivationEmail:
    def test_escapes_name(self):
        html = render_activation_email("<script>x</script>", "https://app/activate?token=t")
        assert "<script>x</script>" not in html
        assert "&lt;script&gt;" in html


class TestSendActivationEmail:
    """Tests for send_activation_email."""

    @pytest.mark.asyncio
    async def test_simulated_when_disabled(self):
        with (
            patch("supchaissac.core.email.settings") as mock_settings,
            patch("supchaissac.core.email.send_email", new_callable=AsyncMock) as mock_send,
        ):
            mock_settings.email_enabled = False
            mock_settings.app_url = "https://supchaissac.test/"

            result = await send_activation_email("jean@ac-nantes.fr", "Jean", "tok")

        assert result.sent is False
        assert result.link == "https://supchaissac.test/activate?token=tok"
        mock_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_academic_address_not_sent(self):
        with (
            patch("supchaissac.core.email.settings") as mock_settings,
            patch("supchaissac.core.email.send_email", new_callable=AsyncMock) as mock_send,
        ):
            mock_settings.email_enabled = True
            mock_settings.app_url = "https://supchaissac.test"

            result = await send_activation_email("jean@gmail.com", "Jean", "tok")

        assert result.sent is False
        assert result.link is not None
        mock_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sent(self):
        with (
            patch("supchaissac.core.email.settings") as mock_settings,
            patch("supchaissac.core.email.send_email", new_callable=AsyncMock) as mock_send,
        ):
            mock_settings.email_enabled = True
            mock_settings.app_url = "https://supchaissac.test"
            mock_send.return_value = True

            result = await send_activation_email("jean@ac-nantes.fr", "Jean", "tok")

        assert result.sent is True
        assert result.link is None
        assert mock_send.call_args.kwargs["to_email"] == "jean@ac-nantes.fr"

    @pytest.mark.asyncio
    async def test_send_failure_reported(self):
        with (
            patch("supchaissac.core.email.settings") as mock_settings,
            patch("supchaissac.core.email.send_email", new_callable=AsyncMock) as mock_send,
        ):
            mock_settings.email_enabled = True
            mock_settings.app_url = "https://supchaissac.test"
            mock_send.return_value = False

            result = await send_activation_email("jean@ac-nantes.fr", "Jean", "tok")

        assert result.sent is False

    def test_activation_link_format(self):
        with patch("supchaissac.core.email.settings") as mock_settings:
            mock_settings.app_url = "http://localhost:5173"
            assert activation_link("abc") == "http://localhost:5173/activate?token=abc"
