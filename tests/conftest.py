from collections.abc import Mapping

import pytest

from caption_scribe.types import Response

WATCH_PAGE = """<html><meta name="title" content="Test Video Title"><script>
    var ytInitialPlayerResponse = {
      "playabilityStatus": {"status": "OK"},
      "captions":{
        "playerCaptionsTracklistRenderer": {
          "captionTracks": [
            {
              "languageCode": "en",
              "baseUrl": "https://www.youtube.com/api/timedtext?v=abc123&lang=en",
              "name": {
                "simpleText": "English"
              }
            },
            {
              "languageCode": "es",
              "baseUrl": "https://www.youtube.com/api/timedtext?v=abc123&lang=es&kind=asr",
              "name": {
                "simpleText": "Spanish (auto-generated)"
              },
              "kind": "asr"
            }
          ],
          "translationLanguages": [
            {
              "languageCode": "fr",
              "languageName": {
                "simpleText": "French"
              }
            }
          ]
        }
    },"videoDetails": {
        "title": "Sample Video",
        "videoId": "abc123"
      }
    };
</script></html>"""

CAPTION_XML = """<?xml version="1.0" encoding="utf-8" ?><transcript>
<text start="0.0" dur="1.54">Hey, this is just a test</text>
<text start="1.54" dur="4.16">this is &lt;i>not&lt;/i> the original transcript</text>
<text start="5.7" dur="3.239">just something shorter, I made up for testing</text>
</transcript>"""


class FakeTransport:
    def __init__(self, responses: list[Response] | None = None) -> None:
        self.responses = list(responses or [])
        self.call_count = 0
        self.calls: list[tuple[str, str, dict[str, str]]] = []

    def queue(self, body: str, status_code: int = 200, reason_phrase: str = "OK") -> None:
        self.responses.append(Response(status_code, reason_phrase, body.encode("utf-8")))

    def send(self, method: str, url: str, headers: Mapping[str, str]) -> Response:
        self.call_count += 1
        self.calls.append((method, url, dict(headers)))
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class FailingTransport:
    def __init__(self, error: Exception) -> None:
        self.error = error

    def send(self, method: str, url: str, headers: Mapping[str, str]) -> Response:
        raise self.error


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
