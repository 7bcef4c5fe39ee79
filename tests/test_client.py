"""Tests for the Last.fm protocol client."""

from datetime import UTC, datetime

import pytest
import requests
from conftest import API_ROOT, album_json, scrobble_xml

from offline_scrobbler.credentials import Credentials
from offline_scrobbler.errors import (
    ConfigError,
    EmptyAlbumError,
    MalformedResponseError,
    TransportError,
)
from offline_scrobbler.lastfm import (
    DEFAULT_TRACK_DURATION,
    Accepted,
    Ignored,
    LastfmClient,
    Track,
    sign,
)


class TestRequestToken:
    def test_returns_token(self, client, session):
        session.queue_json({"token": "tok123"})
        assert client.request_token() == "tok123"
        call = session.calls[0]
        assert call["url"] == f"{API_ROOT}/?method=auth.gettoken&api_key=key&format=json"
        assert call["data"] == ""

    def test_missing_token_is_malformed(self, client, session):
        session.queue_json({"something": "else"})
        with pytest.raises(MalformedResponseError) as exc:
            client.request_token()
        assert exc.value.missing == "token"

    def test_non_string_token_is_malformed(self, client, session):
        session.queue_json({"token": 42})
        with pytest.raises(MalformedResponseError):
            client.request_token()

    def test_invalid_json_is_malformed(self, client, session):
        session.queue("<html>oops</html>")
        with pytest.raises(MalformedResponseError):
            client.request_token()

    def test_http_error_is_transport_error(self, client, session):
        session.queue('{"error": 10, "message": "Invalid API key"}', status=403)
        with pytest.raises(TransportError) as exc:
            client.request_token()
        assert exc.value.status == 403
        assert exc.value.error_code == 10
        assert "Invalid API key" in str(exc.value)
        assert "Invalid API key" in exc.value.body

    def test_network_failure_is_transport_error(self, client, session):
        session.responses.append(requests.ConnectionError("boom"))
        with pytest.raises(TransportError):
            client.request_token()


class TestGetSessionKey:
    def test_signed_form_and_key(self, client, session):
        session.queue('<lfm status="ok"><session><name>user</name><key>SK</key></session></lfm>')
        assert client.get_session_key("tok") == "SK"

        call = session.calls[0]
        assert call["url"] == API_ROOT
        data = call["data"]
        assert data["method"] == "auth.getSession"
        assert data["token"] == "tok"
        assert data["api_sig"] == sign({"api_key": "key", "method": "auth.getSession", "token": "tok"}, "secret")

    def test_bare_session_document(self, client, session):
        session.queue("<session><key>SK</key></session>")
        assert client.get_session_key("tok") == "SK"

    def test_missing_session_element(self, client, session):
        session.queue('<lfm status="ok"></lfm>')
        with pytest.raises(MalformedResponseError) as exc:
            client.get_session_key("tok")
        assert "session" in exc.value.missing

    def test_missing_key_element(self, client, session):
        session.queue('<lfm status="ok"><session><name>user</name></session></lfm>')
        with pytest.raises(MalformedResponseError) as exc:
            client.get_session_key("tok")
        assert "key" in exc.value.missing

    def test_http_failure_is_not_malformed(self, client, session):
        session.queue('<lfm status="failed"><error code="14">Unauthorized Token</error></lfm>', status=403)
        with pytest.raises(TransportError) as exc:
            client.get_session_key("tok")
        assert exc.value.error_code == 14

    def test_invalid_xml(self, client, session):
        session.queue("not xml")
        with pytest.raises(MalformedResponseError):
            client.get_session_key("tok")


class TestLookupAlbum:
    def test_parses_tracks_in_order(self, client, session):
        session.queue_json(
            album_json(
                [
                    {"name": "One", "duration": 180},
                    {"name": "Two", "duration": "200"},
                    {"name": "Three", "duration": 220},
                ]
            )
        )
        album = client.lookup_album("Artist", "Album")
        assert album.title == "Album"
        assert album.url == "https://www.last.fm/music/Artist/Album"
        assert album.tracks == (Track("One", 180), Track("Two", 200), Track("Three", 220))

    def test_percent_encodes_query(self, client, session):
        session.queue_json(album_json([{"name": "Hells Bells", "duration": 312}]))
        client.lookup_album("AC/DC", "Back in Black")
        assert session.calls[0]["url"] == (
            f"{API_ROOT}/?method=album.getInfo&artist=AC%2FDC&album=Back%20in%20Black&api_key=key&format=json"
        )

    def test_missing_duration_defaults(self, client, session):
        session.queue_json(album_json([{"name": "One"}, {"name": "Two", "duration": "n/a"}, {"name": "Three", "duration": None}]))
        album = client.lookup_album("Artist", "Album")
        assert [t.duration for t in album.tracks] == [DEFAULT_TRACK_DURATION] * 3
        assert DEFAULT_TRACK_DURATION == 300

    def test_non_ascii_digit_duration_defaults(self, client, session):
        """Unicode digits that are not a number fall back instead of failing the lookup."""
        session.queue_json(album_json([{"name": "One", "duration": "\u00b2"}]))
        assert client.lookup_album("Artist", "Album").tracks[0].duration == DEFAULT_TRACK_DURATION

    def test_fractional_durations_are_truncated(self, client, session):
        session.queue_json(album_json([{"name": "One", "duration": 245.0}, {"name": "Two", "duration": "199.7"}]))
        assert [t.duration for t in client.lookup_album("Artist", "Album").tracks] == [245, 199]

    def test_negative_and_infinite_durations_default(self, client, session):
        session.queue_json(album_json([{"name": "One", "duration": -5}, {"name": "Two", "duration": "inf"}, {"name": "Three", "duration": True}]))
        assert [t.duration for t in client.lookup_album("Artist", "Album").tracks] == [DEFAULT_TRACK_DURATION] * 3

    def test_zero_duration_is_kept(self, client, session):
        session.queue_json(album_json([{"name": "Intro", "duration": 0}]))
        assert client.lookup_album("Artist", "Album").tracks[0].duration == 0

    def test_single_track_object(self, client, session):
        session.queue_json(album_json({"name": "Only", "duration": 100}))  # type: ignore[arg-type]
        assert client.lookup_album("Artist", "Album").tracks == (Track("Only", 100),)

    def test_absent_tracks_is_empty_album(self, client, session):
        session.queue_json({"album": {"name": "Album"}})
        with pytest.raises(EmptyAlbumError) as exc:
            client.lookup_album("Artist", "Album")
        assert not isinstance(exc.value, MalformedResponseError)
        assert exc.value.album == "Album"

    def test_empty_track_list_is_empty_album(self, client, session):
        session.queue_json(album_json([]))
        with pytest.raises(EmptyAlbumError):
            client.lookup_album("Artist", "Album")

    def test_missing_album_is_malformed(self, client, session):
        session.queue_json({"results": {}})
        with pytest.raises(MalformedResponseError) as exc:
            client.lookup_album("Artist", "Album")
        assert exc.value.missing == "album"

    def test_track_array_of_wrong_type_is_malformed(self, client, session):
        session.queue_json({"album": {"name": "Album", "tracks": {"track": "x"}}})
        with pytest.raises(MalformedResponseError) as exc:
            client.lookup_album("Artist", "Album")
        assert exc.value.missing == "album.tracks.track"

    def test_track_without_name_is_malformed(self, client, session):
        session.queue_json(album_json([{"duration": 100}]))
        with pytest.raises(MalformedResponseError):
            client.lookup_album("Artist", "Album")

    def test_error_document(self, client, session):
        session.queue_json({"error": 6, "message": "Album not found"})
        with pytest.raises(TransportError) as exc:
            client.lookup_album("Artist", "Nope")
        assert exc.value.error_code == 6


class TestScrobble:
    WHEN = datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)

    def test_accepted(self, client, session):
        session.queue(scrobble_xml(1, 0))
        assert client.scrobble("Artist", "Track", self.WHEN) == Accepted()

        data = session.calls[0]["data"]
        assert data["method"] == "track.scrobble"
        assert data["timestamp"] == "1700000000"
        assert data["sk"] == "sk"
        unsigned = {k: v for k, v in data.items() if k != "api_sig"}
        assert data["api_sig"] == sign(unsigned, "secret")

    def test_ignored(self, client, session):
        session.queue(scrobble_xml(0, 1, code="1", message="reason"))
        assert client.scrobble("Artist", "Track", self.WHEN) == Ignored("1", "reason")

    def test_ignored_without_text(self, client, session):
        session.queue(scrobble_xml(0, 1, code="3"))
        assert client.scrobble("Artist", "Track", self.WHEN) == Ignored("3", "")

    def test_nothing_accepted_or_ignored_is_malformed(self, client, session):
        session.queue(scrobble_xml(0, 0))
        with pytest.raises(MalformedResponseError):
            client.scrobble("Artist", "Track", self.WHEN)

    def test_both_counts_set_is_malformed(self, client, session):
        session.queue(scrobble_xml(1, 1))
        with pytest.raises(MalformedResponseError):
            client.scrobble("Artist", "Track", self.WHEN)

    def test_non_integer_count_is_malformed(self, client, session):
        session.queue('<lfm status="ok"><scrobbles accepted="yes" ignored="0"/></lfm>')
        with pytest.raises(MalformedResponseError):
            client.scrobble("Artist", "Track", self.WHEN)

    def test_ignored_without_message_is_malformed(self, client, session):
        session.queue('<lfm status="ok"><scrobbles accepted="0" ignored="1"><scrobble/></scrobbles></lfm>')
        with pytest.raises(MalformedResponseError) as exc:
            client.scrobble("Artist", "Track", self.WHEN)
        assert "ignoredMessage" in exc.value.missing

    def test_http_failure_skips_parsing(self, client, session):
        session.queue('<lfm status="failed"><error code="9">Invalid session key</error></lfm>', status=403)
        with pytest.raises(TransportError) as exc:
            client.scrobble("Artist", "Track", self.WHEN)
        assert exc.value.error_code == 9

    def test_rejects_naive_time(self, client, session):
        with pytest.raises(ValueError, match="timezone-aware"):
            client.scrobble("Artist", "Track", datetime(2023, 11, 14, 22, 13, 20))
        assert session.calls == []

    def test_requires_session_key(self, session):
        unauthenticated = LastfmClient(Credentials("key", "secret"), session=session, api_root=API_ROOT)
        with pytest.raises(ConfigError):
            unauthenticated.scrobble("Artist", "Track", self.WHEN)
        assert session.calls == []


class TestClientSetup:
    def test_default_session_sends_user_agent(self, credentials):
        client = LastfmClient(credentials)
        assert "offline-scrobbler" in client.session.headers["User-Agent"]

    def test_timeout_is_passed_through(self, credentials, session):
        client = LastfmClient(credentials, session=session, api_root=API_ROOT + "/", timeout=5.0)
        session.queue_json({"token": "t"})
        client.request_token()
        assert session.calls[0]["timeout"] == 5.0
        assert session.calls[0]["url"].startswith(API_ROOT + "/?")
