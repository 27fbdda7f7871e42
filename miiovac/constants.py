"""miIO vacuum protocol constants for cleaner code."""


# Raw keys found in get_status / get_consumable records
class StatusKey:
    ERROR_CODE = "error_code"  # Error code (see ERROR_CODE_NAMES)
    STATE = "state"  # Status code (see STATE_LABELS)
    BATTERY = "battery"  # Battery level (%)
    CLEAN_TIME = "clean_time"  # Cleaning time of current/last run (s)
    CLEAN_AREA = "clean_area"  # Area of current/last run (cm2 * 100)
    FAN_POWER = "fan_power"  # Fan power, matches custom mode values
    IN_CLEANING = "in_cleaning"  # Is device cleaning

    # Consumables
    MAIN_BRUSH_WORK_TIME = "main_brush_work_time"
    SIDE_BRUSH_WORK_TIME = "side_brush_work_time"
    FILTER_WORK_TIME = "filter_work_time"
    SENSOR_DIRTY_TIME = "sensor_dirty_time"


# Remote methods understood by the vacuum firmware
class VacuumCommand:
    GET_STATUS = "get_status"
    GET_CONSUMABLE = "get_consumable"

    # Cleaning lifecycle
    START = "app_start"
    PAUSE = "app_pause"
    STOP = "app_stop"
    CHARGE = "app_charge"
    SPOT = "app_spot"
    SET_FAN_SPEED = "set_custom_mode"

    # Zones and navigation
    ZONED_CLEAN = "app_zoned_clean"
    STOP_ZONED_CLEAN = "stop_zoned_clean"
    RESUME_ZONED_CLEAN = "resume_zoned_clean"
    GOTO_TARGET = "app_goto_target"
    FIND_ME = "find_me"

    # History and map
    CLEAN_SUMMARY = "get_clean_summary"
    CLEAN_RECORD = "get_clean_record"
    GET_MAP = "get_map_v1"

    # Identity
    INFO = "miIO.info"
    SERIAL_NUMBER = "get_serial_number"

    # Sound
    GET_SOUND_VOLUME = "get_sound_volume"
    CHANGE_SOUND_VOLUME = "change_sound_volume"
    GET_CURRENT_SOUND = "get_current_sound"
    TEST_SOUND_VOLUME = "test_sound_volume"


# Raw state code -> semantic label
STATE_LABELS = {
    1: "initiating",
    2: "charger-offline",
    3: "waiting",
    5: "cleaning",
    6: "returning",
    8: "charging",
    9: "charging-error",
    10: "paused",
    11: "spot-cleaning",
    12: "error",
    13: "shutting-down",
    14: "updating",
    15: "docking",
    17: "zone-cleaning",
    100: "full",
}

CLEANING_LABELS = frozenset({"cleaning", "spot-cleaning", "zone-cleaning"})

# Firmware error codes, used for log output only
ERROR_CODE_NAMES = {
    0: "No error",
    1: "Laser sensor fault",
    2: "Collision sensor fault",
    3: "Wheel floating",
    4: "Cliff sensor fault",
    5: "Main brush blocked",
    6: "Side brush blocked",
    7: "Wheel blocked",
    8: "Device stuck",
    9: "Dust bin missing",
    10: "Filter blocked",
    11: "Magnetic field detected",
    12: "Low battery",
    13: "Charging problem",
    14: "Battery failure",
    15: "Wall sensor fault",
    16: "Uneven surface",
    17: "Side brush failure",
    18: "Suction fan failure",
    19: "Unpowered charging station",
    20: "Unknown Error",
    21: "Laser pressure sensor problem",
    22: "Charge sensor problem",
    23: "Dock problem",
    24: "No-go zone or invisible wall detected",
    254: "Bin full",
    255: "Internal error",
    -1: "Unknown Error",
}


# Fan power presets accepted by set_custom_mode
class FanSpeed:
    QUIET = 38
    BALANCED = 60
    TURBO = 77


# Signal names published by VacuumDevice
class Signal:
    CHARGING = "charging"
    CLEANING = "cleaning"
    ERROR = "error"
    FAN_SPEED = "fan_speed"


AREA_DIVISOR = 1_000_000  # raw area units per square metre
