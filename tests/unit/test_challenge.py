"""Tests for challenge-page detection and page classification."""

from __future__ import annotations

import pytest
from conftest import SEARCH_URL, SORRY_URL, make_response

from gsearch.browser.challenge import classify_page, detect_challenge, scan_markup
from gsearch.models.states import PageClassification


class TestDetectChallenge:
    @pytest.mark.parametrize(
        "url",
        [
            SORRY_URL,
            "https://www.google.com/sorry/",
            "https://www.google.com/recaptcha/api2/anchor",
            "https://example.com/captcha?id=1",
        ],
    )
    def test_challenge_urls(self, url: str) -> None:
        detection = detect_challenge(url)
        assert detection.detected
        assert detection.url == url

    def test_response_url_checked(self) -> None:
        detection = detect_challenge("https://www.google.com/", SORRY_URL)
        assert detection.detected
        assert detection.url == SORRY_URL

    def test_most_specific_pattern_reported(self) -> None:
        assert detect_challenge(SORRY_URL).pattern == "google.com/sorry/index"

    def test_normal_url(self) -> None:
        assert not detect_challenge(SEARCH_URL).detected


class TestClassifyPage:
    def test_ok_response_is_normal(self) -> None:
        assert classify_page(SEARCH_URL, make_response(SEARCH_URL)) is PageClassification.NORMAL

    def test_challenge_beats_status(self) -> None:
        response = make_response(SORRY_URL, ok=False, status=429)
        assert classify_page(SORRY_URL, response) is PageClassification.CHALLENGE_PAGE

    def test_challenge_with_ok_status(self) -> None:
        assert classify_page(SORRY_URL, make_response(SORRY_URL)) is PageClassification.CHALLENGE_PAGE

    def test_redirect_to_challenge_seen_on_page_url(self) -> None:
        assert classify_page(SORRY_URL, make_response(SEARCH_URL)) is PageClassification.CHALLENGE_PAGE

    def test_non_ok_is_load_failure(self) -> None:
        response = make_response(SEARCH_URL, ok=False, status=500)
        assert classify_page(SEARCH_URL, response) is PageClassification.LOAD_FAILURE

    def test_missing_response_is_load_failure(self) -> None:
        assert classify_page(SEARCH_URL, None) is PageClassification.LOAD_FAILURE


class TestScanMarkup:
    def test_challenge_markup(self) -> None:
        markers = scan_markup("<div>Please solve the recaptcha to show you're not a robot</div>")
        assert markers.contains_recaptcha
        assert markers.contains_robot
        assert not markers.contains_error

    def test_error_markup(self) -> None:
        markers = scan_markup("<p>We're sorry...</p>")
        assert markers.contains_error
        assert not markers.contains_recaptcha

    def test_clean_markup(self) -> None:
        markers = scan_markup("<html><body>results</body></html>")
        assert not (markers.contains_recaptcha or markers.contains_robot or markers.contains_error)
