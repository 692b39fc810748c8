"""Constants shared with downstream consumers.

These values are part of the external contract of the converter output and
must match what the tracking framework expects bit for bit.
"""

# Event/sensor identity
MUPIX_EVENT_TYPE = "MUPIX7"
MUPIX_SENSOR_TYPE = "MUPIX7"
MUPIX_SENSOR_ID = 71

# Sensor geometry
SENSOR_NUM_COLS = 40
SENSOR_NUM_ROWS = 32

# Pixels are binary: a hit always carries signal 1
BINARY_SIGNAL = 1

# Output collection names
PIXEL_COLLECTION_NAME = "zsdata_mupix7"
TRIGGER_COLLECTION_NAME = "eudet_triggers"
TOT_COLLECTION_NAME = "eudet_tots"

# Trigger labels
TLU_TRIGGER_TAG = 0x1
GENERIC_TRIGGER_TAG = 0xBA
TOT_LABEL = 0x2

# Bit masks for the tagged 64-bit trigger word
TIMESTAMP_MASK_48 = 0xFFFF_FFFF_FFFF
LOW_BYTE_MASK = 0xFF
LABEL_MASK_16 = 0xFFFF
FRAME_TIMESTAMP_MASK_32 = 0xFFFF_FFFF

# Returned by trigger id lookups that cannot be answered
INVALID_TRIGGER_ID = 0xFFFF_FFFF

# Quick-look planes are only populated above this trigger id
QUICKLOOK_MIN_TRIGGER_ID = 100

# Cell id layout of zero-suppressed tracker data
ZS_DATA_DEFAULT_ENCODING = "sensorID:7,sparsePixelType:5"
SPARSE_PIXEL_TYPE_MUPIXEL = 3
TRIGGER_STREAM_ID = 1

# Sensor ids that are folded onto a short id in the cell encoding
SENSOR_ID_ALIASES = {601: 61, 701: 71}

# Supported merge window sizes
MIN_WINDOW_SIZE = 1
MAX_WINDOW_SIZE = 3
