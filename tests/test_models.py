"""Unit tests for garden models, presentation envelopes and topic helpers."""

import json

import pytest
from gardenplots import (
    SQUARE_COUNT,
    Envelope,
    MessageType,
    OwnedPlot,
    Particle,
    SpawnPlant,
    Toast,
    Topics,
    VisitorGardenState,
    create_message,
    square_offset,
    to_nats_subject,
    topic_for_event,
    validate_message,
)
from pydantic import ValidationError

from conftest import START


def _make_toast_envelope(**overrides) -> Envelope:
    fields = {
        "source": "garden",
        "url_slug": "garden-town",
        "msg_type": MessageType.TOAST,
        "payload": Toast(visitor_id="v1", title="Hi", text="Hello"),
    }
    fields.update(overrides)
    return create_message(**fields)


# --- Topics ---


class TestTopics:
    def test_world_scoped_topics(self):
        assert Topics.assets("garden-town") == "/world/garden-town/assets"
        assert Topics.effects("garden-town") == "/world/garden-town/effects"
        assert Topics.toasts("garden-town") == "/world/garden-town/toasts"

    def test_nats_subject_conversion(self):
        assert to_nats_subject("/world/garden-town/assets") == "world.garden-town.assets"

    def test_wildcard(self):
        assert to_nats_subject(Topics.ALL_WORLDS) == "world.>"


class TestTopicForEvent:
    @pytest.mark.parametrize(
        "msg_type",
        [
            MessageType.SPAWN_PLANT,
            MessageType.UPDATE_PLANT_IMAGE,
            MessageType.REMOVE_ASSETS,
            MessageType.LABEL_PLOT,
        ],
    )
    def test_asset_events(self, msg_type: MessageType):
        assert topic_for_event("w", msg_type) == "/world/w/assets"

    def test_particle(self):
        assert topic_for_event("w", MessageType.PARTICLE) == "/world/w/effects"

    def test_toast(self):
        assert topic_for_event("w", MessageType.TOAST) == "/world/w/toasts"


# --- Envelopes ---


class TestCreateMessage:
    def test_topic_follows_event_type(self):
        assert _make_toast_envelope().topic == "/world/garden-town/toasts"
        env = _make_toast_envelope(
            msg_type=MessageType.PARTICLE, payload=Particle(name="Sparkle", duration=3, asset_id="a")
        )
        assert env.topic == "/world/garden-town/effects"

    def test_from_alias_on_wire(self):
        env = _make_toast_envelope()
        data = json.loads(env.model_dump_json(by_alias=True))
        assert data["from"] == "garden"
        assert data["type"] == "toast"
        assert data["payload"]["title"] == "Hi"

    def test_wire_round_trip(self):
        env = _make_toast_envelope()
        parsed = Envelope.model_validate_json(env.model_dump_json(by_alias=True))
        assert parsed == env
        assert parsed.timestamp.tzinfo is not None

    def test_model_payload_dumped_as_json(self):
        env = _make_toast_envelope(
            msg_type=MessageType.SPAWN_PLANT,
            payload=SpawnPlant(
                asset_id="p1",
                plot_asset_id="plot-a",
                visitor_id="v1",
                seed_id=1,
                square_index=0,
                image_url="carrot-0.png",
                offset_x=-48,
                offset_y=-48,
            ),
        )
        assert env.payload["offset_x"] == -48.0
        assert env.topic == Topics.assets("garden-town")

    def test_unique_ids(self):
        assert _make_toast_envelope().id != _make_toast_envelope().id


class TestValidateMessage:
    def test_valid(self):
        assert validate_message(_make_toast_envelope()) == []

    def test_empty_source(self):
        errors = validate_message(_make_toast_envelope(source=" "))
        assert "'from' must not be empty" in errors

    def test_empty_url_slug(self):
        errors = validate_message(_make_toast_envelope(url_slug=""))
        assert "'url_slug' must not be empty" in errors

    def test_topic_must_match_event_type(self):
        env = _make_toast_envelope().model_copy(update={"topic": Topics.assets("garden-town")})
        [error] = validate_message(env)
        assert "belong on /world/garden-town/toasts" in error

    def test_topic_of_other_world_rejected(self):
        env = _make_toast_envelope().model_copy(update={"topic": Topics.toasts("elsewhere")})
        assert validate_message(env) != []

    def test_payload_mismatch(self):
        env = _make_toast_envelope(
            msg_type=MessageType.PARTICLE, payload={"name": "Sparkle", "duration": 0, "asset_id": "a"}
        )
        errors = validate_message(env)
        assert any(e.startswith("payload.duration") for e in errors)

    def test_particle_needs_positive_duration(self):
        with pytest.raises(ValidationError):
            Particle(name="Sparkle", duration=0, asset_id="a")


# --- Layout ---


class TestSquareOffset:
    def test_corners(self):
        assert square_offset(0) == (-48.0, -48.0)
        assert square_offset(3) == (48.0, -48.0)
        assert square_offset(SQUARE_COUNT - 1) == (48.0, 48.0)

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            square_offset(SQUARE_COUNT)
        with pytest.raises(ValueError):
            square_offset(-1)


# --- Garden state ---


class TestVisitorGardenState:
    def test_wire_names(self):
        state = VisitorGardenState()
        state.owned_plot = OwnedPlot(plot_asset_id="plot-a", claimed_at=START)
        data = state.to_wire()
        assert set(data) == {"coinsAvailable", "totalCoinsEarned", "ownedPlot", "seedsPurchased", "plants"}
        assert data["ownedPlot"]["plotSquares"] == [None] * SQUARE_COUNT

    def test_round_trip_is_lossless(self):
        state = VisitorGardenState(coins_available=3, total_coins_earned=9)
        state.owned_plot = OwnedPlot(plot_asset_id="plot-a", claimed_at=START)
        assert VisitorGardenState.model_validate(state.to_wire()) == state

    def test_coins_never_negative(self):
        state = VisitorGardenState()
        with pytest.raises(ValidationError):
            state.coins_available = -1

    def test_plot_must_have_full_grid(self):
        with pytest.raises(ValidationError):
            OwnedPlot(plot_asset_id="plot-a", claimed_at=START, squares=[None] * 3)
