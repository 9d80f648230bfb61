from datetime import timedelta

import pytest

from pastebin.config import Settings
from pastebin.core.identifiers import PASTE_ID_LENGTH, WORDS, new_memorable_password, new_paste_id
from pastebin.core.security import (
    create_access_token,
    create_download_token,
    decode_token,
    hash_password,
    verify_download_token,
    verify_password,
)


@pytest.fixture
def settings():
    return Settings(_env_file=None, SECRET_KEY="unit-secret")


def test_paste_ids_are_short_and_url_safe():
    ids = {new_paste_id() for _ in range(1000)}
    assert len(ids) == 1000
    for paste_id in ids:
        assert len(paste_id) == PASTE_ID_LENGTH
        assert all(ch in "0123456789abcdef" for ch in paste_id)


def test_memorable_password_shape():
    for _ in range(200):
        first, second = new_memorable_password().split("-")
        assert first in WORDS
        assert second in WORDS


def test_word_list():
    assert 80 <= len(WORDS) <= 100
    assert len(set(WORDS)) == len(WORDS)
    assert not any("-" in word for word in WORDS)


def test_password_hashing():
    hashed = hash_password("ember-quartz")
    assert hashed != "ember-quartz"
    assert verify_password("ember-quartz", hashed)
    assert not verify_password("ember-quarts", hashed)
    assert not verify_password("", hashed)
    assert not verify_password("ember-quartz", None)


class TestDownloadToken:
    def test_valid_for_its_paste(self, settings):
        token = create_download_token("abcdef123456", settings)
        assert verify_download_token(token, "abcdef123456", settings)

    def test_rejected_for_another_paste(self, settings):
        token = create_download_token("abcdef123456", settings)
        assert not verify_download_token(token, "ffffff000000", settings)

    def test_expired(self, settings):
        token = create_download_token("abcdef123456", settings, expires_delta=timedelta(seconds=-1))
        assert not verify_download_token(token, "abcdef123456", settings)

    def test_default_lifetime_is_five_minutes(self, settings):
        payload = decode_token(create_download_token("abcdef123456", settings), settings)
        access = decode_token(create_access_token(1, settings), settings)
        # exp is relative to issue time, compare the two lifetimes
        assert access["exp"] - payload["exp"] == pytest.approx(24 * 3600 - 5 * 60, abs=2)

    def test_session_token_is_not_a_download_token(self, settings):
        token = create_access_token(1, settings)
        assert not verify_download_token(token, "1", settings)

    def test_other_key(self, settings):
        token = create_download_token("abcdef123456", Settings(_env_file=None, SECRET_KEY="other"))
        assert not verify_download_token(token, "abcdef123456", settings)

    @pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
    def test_malformed(self, settings, token):
        assert not verify_download_token(token, "abcdef123456", settings)
