from gardenplots.helpers.factory import create_message
from gardenplots.helpers.growth import (
    GrowthChange,
    current_level,
    effective_level,
    is_ready_for_harvest,
    refresh_growth,
    time_remaining_to_next_level,
)
from gardenplots.helpers.layout import square_offset
from gardenplots.helpers.topic_map import topic_for_event
from gardenplots.helpers.validation import validate_message

__all__ = [
    "GrowthChange",
    "create_message",
    "current_level",
    "effective_level",
    "is_ready_for_harvest",
    "refresh_growth",
    "square_offset",
    "time_remaining_to_next_level",
    "topic_for_event",
    "validate_message",
]
