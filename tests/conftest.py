from __future__ import annotations

import pytest


class ScriptedPrompter:
    """Prompter that replays canned answers and records every question."""

    def __init__(self, answers=None, confirms=None):
        self.answers = list(answers or [])
        self.confirms = list(confirms or [])
        self.asked: list[str] = []
        self.hidden: list[str] = []

    def ask(self, text, *, hide=False):
        self.asked.append(text)
        if hide:
            self.hidden.append(text)
        return self.answers.pop(0)

    def confirm(self, text):
        self.asked.append(text)
        return self.confirms.pop(0)


@pytest.fixture
def make_prompter():
    return ScriptedPrompter


@pytest.fixture
def clean_env(monkeypatch):
    for key in (
        "GOOGLE_ADS_DEVELOPER_TOKEN",
        "GOOGLE_ADS_CLIENT_ID",
        "GOOGLE_ADS_CLIENT_SECRET",
        "GOOGLE_ADS_REFRESH_TOKEN",
        "GOOGLE_ADS_CUSTOMER_ID",
        "GOOGLE_ADS_LOGIN_CUSTOMER_ID",
        "GOOGLE_ADS_AUTH_URI",
        "GOOGLE_ADS_TOKEN_URI",
        "ADS_ENV_PATH",
        "ADS_OAUTH_HOST",
        "ADS_OAUTH_PORT",
        "ADS_OAUTH_GRACE_SECONDS",
        "ADS_CLICK_VIEW_DIR",
        "ADS_COLLECT_DAYS",
        "ADS_REQUEST_DELAY_SECONDS",
    ):
        # setenv first so teardown also drops values load_dotenv writes.
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch
