"""NHL rink constants in feed coordinates (feet, centre ice at the origin)."""

RINK_HALF_LENGTH = 100.0
RINK_HALF_WIDTH = 42.5

# Goal lines / net position on either end
NET_X = 89.0

# Blue lines
BLUE_LINE_X = 25.0

# Deep end of the zone, used to tell a deep breakout from a neutral-zone start
DEEP_ZONE_X = 50.0

# Slot: goal line up to the top of the circles, between the faceoff dots
SLOT_MIN_X = 54.0
SLOT_MAX_X = 89.0
SLOT_HALF_WIDTH = 22.0

# Inner slot and faceoff circle band used by the defensive zone breakdown
INNER_SLOT_MIN_X = 69.0
INNER_SLOT_HALF_WIDTH = 10.0
POINT_MIN_X = 60.0
POINT_MAX_X = 75.0
POINT_HALF_WIDTH = 15.0

# Location-only high danger definition
HIGH_DANGER_MAX_DISTANCE = 25.0
HIGH_DANGER_MAX_ANGLE = 45.0
