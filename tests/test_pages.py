"""Tests for Dashboard wiring, auth flows and row formatters."""

import pytest

from macc_admin.errors import ApiError
from macc_admin.models import Application, Career, ServiceSection, User
from macc_admin.pages import Dashboard, fmt_application, fmt_career, fmt_career_detail, fmt_service, fmt_user


@pytest.fixture
def dash(session, http, notifier):
    return Dashboard(session=session, http=http, notifier=notifier)


class TestAuthFlows:
    def test_sign_in_persists_token(self, dash, http, session, notifier):
        http.post.return_value = {
            "message": "Login successful",
            "userUpdated": {"_id": "u1", "userName": "admin", "email": "admin@macc-fm.com", "token": "tok-1"},
        }

        assert dash.sign_in("admin@macc-fm.com", "admin123")
        assert session.token == "tok-1"
        assert session.user["userName"] == "admin"
        assert "token" not in session.user
        assert notifier.last.message == "Login successful"

    def test_sign_in_failure(self, dash, http, session, notifier):
        http.post.side_effect = ApiError(None, status_code=401)

        assert dash.sign_in("admin@macc-fm.com", "wrong") is None
        assert not session.is_authenticated
        assert notifier.last.message == "Invalid email or password"

    def test_sign_out_clears_even_when_backend_fails(self, dash, http, signed_in, notifier):
        http.post.side_effect = ApiError(code="NETWORK_ERROR")

        dash.sign_out()

        http.post.assert_called_once_with("/users/logout", json={"token": "tok-123"})
        assert not signed_in.is_authenticated
        assert signed_in.user is None
        assert notifier.last.message == "Logged out"

    def test_forgot_password(self, dash, http, notifier):
        assert dash.forgot_password("admin@macc-fm.com")
        assert notifier.last.message == "Reset link sent to your email"

        http.post.side_effect = ApiError()
        assert not dash.forgot_password("admin@macc-fm.com")
        assert notifier.last.message == "Failed to send reset link"

    def test_change_password_defaults_to_session_email(self, dash, http, signed_in):
        assert dash.change_password("n3w-pass")
        http.post.assert_called_once_with(
            "/users/change_password", json={"email": "admin@macc-fm.com", "newPassword": "n3w-pass"}
        )

    def test_change_password_without_email(self, dash, http, notifier):
        assert not dash.change_password("n3w-pass")
        http.post.assert_not_called()


class TestStats:
    def test_counts(self, dash, http):
        http.get.return_value = {"stats": {"applications": 5, "services": 2, "careers": 3}}
        assert dash.stats().applications == 5

    def test_failure_shows_zeros(self, dash, http):
        http.get.side_effect = ApiError(code="NETWORK_ERROR")
        stats = dash.stats()
        assert (stats.applications, stats.services, stats.careers) == (0, 0, 0)


class TestWiring:
    def test_dialog_success_refetches_its_page(self, dash, http, career_wire):
        http.get.return_value = {"careers": [career_wire("c1")]}
        page = dash.careers_page()
        page.mount()
        http.get.reset_mock()

        form = dash.career_form(page)
        form.open(page.find("c1"))
        assert form.submit()

        http.get.assert_called_once_with("/careers")

    def test_each_mount_is_a_fresh_page(self, dash):
        assert dash.users_page() is not dash.users_page()


class TestFormatters:
    def test_career_line(self, career_wire):
        line = fmt_career(Career.model_validate(career_wire("c1", title="Site | Engineer", active=False)))
        assert line == "c1|Site - Engineer|Engineering|Riyadh|Full-Time|off"

    def test_application_line_shows_job_title_when_resolved(self, application_wire, career_wire):
        bare = Application.model_validate(application_wire("a1", career="c1"))
        populated = Application.model_validate(application_wire("a1", career=career_wire("c1", title="Foreman")))

        assert fmt_application(bare).split("|")[4] == "c1"
        assert fmt_application(populated).split("|")[4] == "Foreman"

    def test_service_and_user_lines(self, section_wire, user_wire):
        assert fmt_service(ServiceSection.model_validate(section_wire("s1"))) == (
            "s1|Water Insulation|العزل المائي|items=1|on"
        )
        assert fmt_user(User.model_validate(user_wire("u1"))) == "u1|hr.lead|hr.lead@macc-fm.com|hr|on"

    def test_career_detail_lists(self, career_wire):
        text = fmt_career_detail(Career.model_validate(career_wire("c1", requirements_en=["BSc", "5 years"])))
        assert "Requirements:\n- BSc\n- 5 years" in text
        assert "Responsibilities" not in text
