# tests/conftest.py
"""
Shared fixtures: sample page sources and a scripted query client.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from uiauto_wda.config import TimeConfig
from uiauto_wda.exceptions import QueryError
from uiauto_wda.interfaces import IQueryClient
from uiauto_wda.timinglogger import TIMING_LOGGER


SAMPLE_PAGE_SOURCE = """<?xml version="1.0" encoding="UTF-8"?>
<AppiumAUT>
  <XCUIElementTypeApplication type="XCUIElementTypeApplication" name="TestApp" label="TestApp" enabled="true" visible="true" x="0" y="0" width="390" height="844">
    <XCUIElementTypeWindow type="XCUIElementTypeWindow" enabled="true" visible="true" x="0" y="0" width="390" height="844">
      <XCUIElementTypeOther type="XCUIElementTypeOther" enabled="true" visible="true" x="0" y="0" width="390" height="844">
        <XCUIElementTypeButton type="XCUIElementTypeButton" name="loginButton" label="Login" enabled="true" visible="true" x="50" y="100" width="290" height="50"/>
        <XCUIElementTypeTextField type="XCUIElementTypeTextField" name="emailField" label="Email" placeholderValue="Enter email" enabled="true" visible="true" x="50" y="200" width="290" height="44"/>
        <XCUIElementTypeSecureTextField type="XCUIElementTypeSecureTextField" name="passwordField" label="Password" enabled="true" visible="true" x="50" y="260" width="290" height="44"/>
        <XCUIElementTypeStaticText type="XCUIElementTypeStaticText" label="Welcome to the app" enabled="true" visible="true" x="50" y="320" width="290" height="30"/>
        <XCUIElementTypeButton type="XCUIElementTypeButton" name="settingsButton" label="Settings" enabled="false" visible="true" x="50" y="400" width="100" height="40"/>
        <XCUIElementTypeSwitch type="XCUIElementTypeSwitch" name="notifySwitch" label="Notifications" enabled="true" visible="true" selected="true" x="250" y="400" width="60" height="40"/>
      </XCUIElementTypeOther>
    </XCUIElementTypeWindow>
  </XCUIElementTypeApplication>
</AppiumAUT>"""


LIST_PAGE_SOURCE = """<AppiumAUT>
  <XCUIElementTypeApplication type="XCUIElementTypeApplication" name="Contacts" x="0" y="0" width="390" height="844">
    <XCUIElementTypeTable type="XCUIElementTypeTable" x="0" y="0" width="390" height="400">
      <XCUIElementTypeCell type="XCUIElementTypeCell" name="row1" x="0" y="0" width="390" height="60">
        <XCUIElementTypeStaticText type="XCUIElementTypeStaticText" label="Alice" x="10" y="10" width="200" height="20"/>
        <XCUIElementTypeStaticText type="XCUIElementTypeStaticText" label="Online" x="10" y="30" width="200" height="20"/>
      </XCUIElementTypeCell>
      <XCUIElementTypeCell type="XCUIElementTypeCell" name="row2" x="0" y="60" width="390" height="60">
        <XCUIElementTypeStaticText type="XCUIElementTypeStaticText" label="Bob" x="10" y="70" width="200" height="20"/>
        <XCUIElementTypeStaticText type="XCUIElementTypeStaticText" label="Offline" x="10" y="90" width="200" height="20"/>
      </XCUIElementTypeCell>
    </XCUIElementTypeTable>
  </XCUIElementTypeApplication>
</AppiumAUT>"""


LOGIN_PAGE_SOURCE = """<AppiumAUT>
  <XCUIElementTypeApplication type="XCUIElementTypeApplication" name="Bank" x="0" y="0" width="390" height="844">
    <XCUIElementTypeOther type="XCUIElementTypeOther" x="0" y="0" width="390" height="844">
      <XCUIElementTypeSecureTextField type="XCUIElementTypeSecureTextField" name="password" label="Password" enabled="true" visible="true" x="20" y="300" width="350" height="44"/>
      <XCUIElementTypeButton type="XCUIElementTypeButton" name="forgotPassword" label="Forgot Password?" enabled="true" visible="true" x="20" y="360" width="200" height="30"/>
    </XCUIElementTypeOther>
  </XCUIElementTypeApplication>
</AppiumAUT>"""


class FakeQueryClient(IQueryClient):
    """
    Scripted query client.

    Each rule maps a fragment of the query value (optionally restricted to
    one locator strategy) to an element handle; the first matching rule
    wins and everything else misses with QueryError. Page sources are
    served in order, the last one repeating.
    """

    def __init__(self, sources: Optional[Sequence[str]] = None):
        self.sources: List[str] = list(sources) if sources is not None else [SAMPLE_PAGE_SOURCE]
        self.source_error: Optional[Exception] = None
        self.rules: List[Tuple[Optional[str], str, str]] = []
        self.texts: Dict[str, str] = {}
        self.rects: Dict[str, Tuple[int, int, int, int]] = {}
        self.displayed: Dict[str, bool] = {}
        self.queries: List[Tuple[str, str]] = []
        self.source_calls = 0

    def on(
        self,
        fragment: str,
        handle: str,
        using: Optional[str] = None,
        text: str = "",
        rect: Tuple[int, int, int, int] = (0, 0, 0, 0),
        displayed: bool = True,
    ) -> "FakeQueryClient":
        self.rules.append((using, fragment, handle))
        self.texts[handle] = text
        self.rects[handle] = rect
        self.displayed[handle] = displayed
        return self

    def find_element(self, using: str, value: str) -> str:
        self.queries.append((using, value))
        for rule_using, fragment, handle in self.rules:
            if rule_using in (None, using) and fragment in value:
                return handle
        raise QueryError("element not found")

    def element_text(self, element_id: str) -> str:
        return self.texts.get(element_id, "")

    def element_displayed(self, element_id: str) -> bool:
        return self.displayed.get(element_id, False)

    def element_rect(self, element_id: str) -> Tuple[int, int, int, int]:
        return self.rects.get(element_id, (0, 0, 0, 0))

    def source(self) -> str:
        self.source_calls += 1
        if self.source_error is not None:
            raise self.source_error
        if len(self.sources) > 1:
            return self.sources.pop(0)
        return self.sources[0]


@pytest.fixture
def sample_source():
    return SAMPLE_PAGE_SOURCE


@pytest.fixture
def list_source():
    return LIST_PAGE_SOURCE


@pytest.fixture
def fake_client():
    return FakeQueryClient()


@pytest.fixture(autouse=True)
def _reset_global_config():
    TimeConfig.reset_to_defaults()
    TIMING_LOGGER.disable()
    yield
    TimeConfig.reset_to_defaults()
    TIMING_LOGGER.disable()
