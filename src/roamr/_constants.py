"""Internal constants shared across the library."""

BASE_URL = "http://192.168.1.100:3000"
USER_AGENT = "roamr-operator/1.0"

# ------------------------------------------------------------------
# Fleet defaults
# ------------------------------------------------------------------

DEFAULT_CENTER_LATITUDE = 37.7749
DEFAULT_CENTER_LONGITUDE = -122.4194
DEFAULT_FLEET_SIZE = 20

#: Half-width (degrees) of the box vehicles are scattered in at seed time.
DEFAULT_SEED_SPREAD = 0.007
#: Per-axis bound (degrees) of the random step an idle vehicle takes each tick.
DEFAULT_IDLE_JITTER = 0.001
#: Per-tick probability that an idle, waiting dynamic vehicle starts a ride.
DEFAULT_AUTO_START_PROBABILITY = 0.15

DEFAULT_ROUTE_POINTS = 36
DEFAULT_ROUTE_RADIUS = 0.002

DEFAULT_TICK_INTERVAL = 10.0
DEFAULT_COMMAND_LATENCY = 1.0

# ------------------------------------------------------------------
# Remote backend
# ------------------------------------------------------------------

VEHICLES_ENDPOINT = "/vehicles"
HISTORY_ENDPOINT = "/history"

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_MAX_POLL_FAILURES = 3

# ------------------------------------------------------------------
# Ride links (QR payloads)
# ------------------------------------------------------------------

RIDE_LINK_SCHEME = "myapp"
RIDE_LINK_ACTION = "startRide"
RIDE_LINK_VEHICLE_PARAM = "vehicleId"

# History action labels written after successful commands.
ACTION_START = "start"
ACTION_STOP = "stop"
