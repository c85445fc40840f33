"""Unit tests for book form binding and flash messages."""

from datetime import date
from urllib.parse import quote

import pytest
from starlette.requests import Request
from starlette.responses import Response

from src.catalog.api.http.flash import FLASH_COOKIE, Flash, pop_flash, redirect_home
from src.catalog.api.http.forms import BookForm, bind_form, submitted_values


def _request_with_cookie(value: str | None) -> Request:
    headers = []
    if value is not None:
        headers.append((b"cookie", f"{FLASH_COOKIE}={value}".encode("latin-1")))
    return Request({"type": "http", "method": "GET", "path": "/books", "headers": headers})


class TestBindForm:
    """Test binding of submitted form data."""

    def test_valid_submission(self, form_data):
        form, errors = bind_form(form_data)

        assert errors == {}
        assert form.name == "Dune"
        assert form.publish_date == date(1965, 1, 1)

    def test_values_are_trimmed(self, form_data):
        form_data["author"] = "  Frank Herbert  "

        form, _ = bind_form(form_data)

        assert form.author == "Frank Herbert"

    def test_submitted_id_is_ignored(self, form_data):
        form_data["id"] = "42"

        form, errors = bind_form(form_data)

        assert errors == {}
        assert form.to_book().id is None
        assert form.to_book(7).id == 7

    @pytest.mark.parametrize("value", ["1965-13-01", "1965/01/01", "yesterday", ""])
    def test_invalid_dates(self, form_data, value):
        form_data["publishDate"] = value

        form, errors = bind_form(form_data)

        assert form is None
        assert errors == {"publishDate": ["Valid date required (yyyy-MM-dd)"]}

    def test_too_long_name(self, form_data):
        form_data["name"] = "x" * 256

        form, errors = bind_form(form_data)

        assert form is None
        assert errors == {"name": ["Maximum length is 255"]}

    def test_author_allows_long_values(self, form_data):
        form_data["author"] = "x" * 1000

        _, errors = bind_form(form_data)

        assert errors == {}

    def test_missing_fields(self):
        form, errors = bind_form({})

        assert form is None
        assert errors == {
            "name": ["This field is required"],
            "author": ["This field is required"],
            "publishDate": ["This field is required"],
            "description": ["This field is required"],
        }

    def test_submitted_values_keep_only_form_fields(self, form_data):
        form_data["csrf"] = "token"

        assert "csrf" not in submitted_values(form_data)
        assert submitted_values(form_data)["publishDate"] == "1965-01-01"

    def test_prefilled_values(self, make_book):
        assert BookForm.from_book(make_book()) == {
            "name": "Dune",
            "author": "Herbert",
            "publishDate": "1965-01-01",
            "description": "Sci-fi",
        }


class TestFlash:
    """Test one-time messages carried across a redirect."""

    def test_redirect_without_message(self):
        response = redirect_home()

        assert response.status_code == 303
        assert response.headers["location"] == "/books"
        assert "set-cookie" not in response.headers

    def test_redirect_with_message(self):
        response = redirect_home("success", "Book Dune has been created")

        cookie = response.headers["set-cookie"]
        assert cookie.startswith(f"{FLASH_COOKIE}={quote('success:Book Dune has been created')}")

    def test_pop_flash_reads_and_clears(self):
        request = _request_with_cookie(quote("error:Book has not been deleted"))
        response = Response()

        flash = pop_flash(request, response)

        assert flash == Flash(kind="error", message="Book has not been deleted")
        assert "Max-Age=0" in response.headers["set-cookie"]

    def test_pop_flash_without_cookie(self):
        response = Response()

        assert pop_flash(_request_with_cookie(None), response) is None
        assert "set-cookie" not in response.headers

    def test_unknown_kind_is_ignored(self):
        assert pop_flash(_request_with_cookie(quote("warning:hello")), Response()) is None
