"""
Configuration and constants for the cross-country skiing IMU cycle pipeline.
Adjust these to match your sensor exports and sampling rate.
"""

# Sampling rate of the IMU (Hz). Physilog-style sensors commonly log at 128 or 256 Hz.
DEFAULT_SAMPLE_RATE_HZ = 256.0

# Gaussian low-pass spread (in samples). Chest accel gets a milder filter than the arm gyro.
ACCEL_GAUSS_SIGMA = 10
GYRO_GAUSS_SIGMA = 15

# Cycle detection on the arm gyroscope z-axis (deg/s).
CYCLE_PEAK_MIN_DISTANCE = 100   # samples between two pole plants
CYCLE_PEAK_MIN_AMPLITUDE = 100.0

# Cycle indicator values. Odd cycles (1-based) get ODD, even cycles EVEN, outside is NEUTRAL.
CYCLE_LABEL_ODD = 3
CYCLE_LABEL_EVEN = -2
CYCLE_LABEL_NEUTRAL = 0

# Scale used when overlaying the indicator on gyro plots.
INDICATOR_PLOT_SCALE = 500

# CSV clocks above this are read as epoch milliseconds (1e11 ms is 1973; 1e11 s is year 5000+).
EPOCH_MS_THRESHOLD = 1e11

# Seconds between the first accelerometer sample and the start of the video.
VIDEO_LAG_S = 7.0

# Session metadata
SESSION_NAME = "XC Skiing"
TIME_UNIT = "Epocms"

# CSV column mapping. Map logical axis names -> your CSV column names.
DEFAULT_TIME_COL = "Timestamp"
DEFAULT_ACCEL_COLS = {"x": "Accelerometer X", "y": "Accelerometer Y", "z": "Accelerometer Z"}
DEFAULT_GYRO_COLS = {"x": "Gyroscope X", "y": "Gyroscope Y", "z": "Gyroscope Z"}

# Manual sub-technique annotations for the sample recording: 1-based cycle numbers per
# annotation id. These are labelling decisions for one recording, not general rules.
XC_SUBTECHNIQUES = {
    1: {
        "name": "Diagonal Stride",
        "abbreviation": "DIA",
        "description": "XC classical skiing diagonal stride",
        "cycles": list(range(20, 22)) + list(range(38, 63)) + list(range(75, 96)),
    },
    2: {
        "name": "Double Poling",
        "abbreviation": "DP",
        "description": "XC classical skiing double poling",
        "cycles": list(range(23, 36)) + list(range(98, 110)),
    },
    3: {
        "name": "Downhill Tucking",
        "abbreviation": "TCK",
        "description": "XC classical skiing downhill tucking",
        "cycles": [68, 97],
    },
}
