"""
Unit tests for the playback controller.
"""

import pytest

from airtwitch.airplay.control import (
    PlaybackController,
    PlaybackState,
    build_play_body,
)
from airtwitch.exceptions import PlaybackError
from tests.fixtures.factories import DeviceFactory, VariantFactory

LIVING_ROOM_URL = "http://192.168.1.20:7000"
BEDROOM_URL = "http://192.168.1.21:7000"


@pytest.fixture
def controller(gateway) -> PlaybackController:
    return PlaybackController(gateway)


@pytest.fixture
def living_room():
    return DeviceFactory.create("Living Room", ipv4=("192.168.1.20",))


@pytest.fixture
def bedroom():
    return DeviceFactory.create("Bedroom", ipv4=("192.168.1.21",))


@pytest.fixture
def variant():
    return VariantFactory.create("chunked")


@pytest.mark.unit
class TestPlayBody:
    """Tests for the PLAY command body."""

    def test_body_format(self):
        assert build_play_body("https://example.test/live.m3u8") == (
            "Content-Location: https://example.test/live.m3u8\nStart-Position: 0.0\n"
        )

    def test_custom_start_position(self):
        assert "Start-Position: 12.5\n" in build_play_body("u", 12.5)


@pytest.mark.unit
class TestPlay:
    """Tests for PlaybackController.play."""

    def test_play_sends_command(self, controller, mock_http, living_room, variant):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play")

        session = controller.play(living_room, variant)

        request = mock_http.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{LIVING_ROOM_URL}/play"
        assert request.headers["User-Agent"] == "MediaControl/1.0"
        assert request.headers["Content-Type"] == "text/parameters"
        assert request.content.decode("utf-8") == (
            f"Content-Location: {variant.uri}\nStart-Position: 0.0\n"
        )
        assert session.device == living_room
        assert session.content_uri == variant.uri
        assert session.state == PlaybackState.PLAYING
        assert controller.state == PlaybackState.PLAYING
        assert controller.session is session
        assert session.started_at.tzinfo is not None

    def test_custom_user_agent(self, gateway, mock_http, living_room, variant):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play")
        controller = PlaybackController(gateway, user_agent="TestAgent/2.0")

        controller.play(living_room, variant)

        assert mock_http.requests[0].headers["User-Agent"] == "TestAgent/2.0"

    def test_rejected_play_leaves_idle(self, controller, mock_http, living_room, variant):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play", status=500)

        with pytest.raises(PlaybackError):
            controller.play(living_room, variant)

        assert controller.state == PlaybackState.IDLE
        assert controller.session is None

    def test_unreachable_device_raises_playback_error(self, controller, mock_http, living_room, variant):
        mock_http.fail("POST", f"{LIVING_ROOM_URL}/play")

        with pytest.raises(PlaybackError):
            controller.play(living_room, variant)

        assert controller.state == PlaybackState.IDLE

    def test_device_without_ipv4_raises_playback_error(self, controller, mock_http, variant):
        device = DeviceFactory.create("IPv6 Only", ipv4=())

        with pytest.raises(PlaybackError):
            controller.play(device, variant)

        assert controller.state == PlaybackState.IDLE
        assert mock_http.requests == []

    def test_play_replaces_active_session(self, controller, mock_http, living_room, bedroom, variant):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play")
        mock_http.add("POST", f"{LIVING_ROOM_URL}/stop")
        mock_http.add("POST", f"{BEDROOM_URL}/play")

        controller.play(living_room, variant)
        session = controller.play(bedroom, variant)

        assert [str(r.url) for r in mock_http.requests] == [
            f"{LIVING_ROOM_URL}/play",
            f"{LIVING_ROOM_URL}/stop",
            f"{BEDROOM_URL}/play",
        ]
        assert session.device == bedroom
        assert controller.state == PlaybackState.PLAYING

    def test_play_proceeds_when_previous_stop_fails(self, controller, mock_http, living_room, bedroom, variant):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play")
        mock_http.add("POST", f"{LIVING_ROOM_URL}/stop", status=500)
        mock_http.add("POST", f"{BEDROOM_URL}/play")

        controller.play(living_room, variant)
        session = controller.play(bedroom, variant)

        assert session.device == bedroom
        assert controller.state == PlaybackState.PLAYING

    def test_play_proceeds_when_previous_device_unreachable(
        self, controller, mock_http, living_room, bedroom, variant
    ):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play")
        mock_http.fail("POST", f"{LIVING_ROOM_URL}/stop")
        mock_http.add("POST", f"{BEDROOM_URL}/play")

        controller.play(living_room, variant)
        controller.play(bedroom, variant)

        assert controller.session.device == bedroom


@pytest.mark.unit
class TestStop:
    """Tests for PlaybackController.stop."""

    def test_stop_sends_command(self, controller, mock_http, living_room, variant):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play")
        mock_http.add("POST", f"{LIVING_ROOM_URL}/stop")
        controller.play(living_room, variant)

        controller.stop()

        request = mock_http.requests_to(f"{LIVING_ROOM_URL}/stop")[0]
        assert request.headers["User-Agent"] == "MediaControl/1.0"
        assert request.content == b""
        assert controller.state == PlaybackState.IDLE
        assert controller.session is None

    def test_stop_while_idle_sends_nothing(self, controller, mock_http):
        controller.stop()

        assert mock_http.requests == []
        assert controller.state == PlaybackState.IDLE

    def test_rejected_stop_still_idle(self, controller, mock_http, living_room, variant):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play")
        mock_http.add("POST", f"{LIVING_ROOM_URL}/stop", status=500)
        controller.play(living_room, variant)

        controller.stop()

        assert controller.state == PlaybackState.IDLE

    def test_unreachable_stop_still_idle(self, controller, mock_http, living_room, variant):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play")
        mock_http.fail("POST", f"{LIVING_ROOM_URL}/stop")
        controller.play(living_room, variant)

        controller.stop()

        assert controller.state == PlaybackState.IDLE

    def test_stop_twice_sends_one_command(self, controller, mock_http, living_room, variant):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play")
        mock_http.add("POST", f"{LIVING_ROOM_URL}/stop")
        controller.play(living_room, variant)

        controller.stop()
        controller.stop()

        assert len(mock_http.requests_to(f"{LIVING_ROOM_URL}/stop")) == 1

    def test_close_stops_active_session(self, controller, mock_http, living_room, variant):
        mock_http.add("POST", f"{LIVING_ROOM_URL}/play")
        mock_http.add("POST", f"{LIVING_ROOM_URL}/stop")
        controller.play(living_room, variant)

        controller.close()
        controller.close()

        assert len(mock_http.requests_to(f"{LIVING_ROOM_URL}/stop")) == 1
        assert controller.state == PlaybackState.IDLE
