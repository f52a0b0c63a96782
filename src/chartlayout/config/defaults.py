"""Default configurations for chartlayout."""

# Categorical palettes, keyed by the name accepted in settings files
PALETTES: dict[str, list[str]] = {
    "tableau10": [
        "#4e79a7",  # Blue
        "#f28e2c",  # Orange
        "#e15759",  # Red
        "#76b7b2",  # Teal
        "#59a14f",  # Green
        "#edc949",  # Yellow
        "#af7aa1",  # Purple
        "#ff9da7",  # Pink
        "#9c755f",  # Brown
        "#bab0ab",  # Grey
    ],
    "category10": [
        "#1f77b4",
        "#ff7f0e",
        "#2ca02c",
        "#d62728",
        "#9467bd",
        "#8c564b",
        "#e377c2",
        "#7f7f7f",
        "#bcbd22",
        "#17becf",
    ],
    "set2": [
        "#66c2a5",
        "#fc8d62",
        "#8da0cb",
        "#e78ac3",
        "#a6d854",
        "#ffd92f",
        "#e5c494",
        "#b3b3b3",
    ],
}

DEFAULT_PALETTE = "tableau10"

# Fill used for graph nodes when no group accessor is given
DEFAULT_NODE_FILL = "currentColor"

# Chart geometry (pixels)
DEFAULT_WIDTH = 640
DEFAULT_HEIGHT = 400
DEFAULT_MARGINS = {"top": 30, "right": 0, "bottom": 30, "left": 40}

# Band padding fractions
DEFAULT_X_PADDING = 0.1  # Separates x groups
DEFAULT_Z_PADDING = 0.05  # Separates bars within a group

# Roughly one y-axis tick per 60 pixels of chart height
PIXELS_PER_Y_TICK = 60

# Force simulation
DEFAULT_ALPHA = 1.0
DEFAULT_ALPHA_MIN = 0.001
DEFAULT_ALPHA_DECAY = 1 - DEFAULT_ALPHA_MIN ** (1 / 300)  # ~0.0228, 300 ticks
DEFAULT_VELOCITY_DECAY = 0.4  # Fraction of velocity lost per tick
DEFAULT_DRAG_ALPHA_TARGET = 0.3
DEFAULT_NODE_STRENGTH = -30.0
DEFAULT_LINK_DISTANCE = 30.0
DEFAULT_CENTER_STRENGTH = 0.1
DEFAULT_DISTANCE_MIN = 1.0
DEFAULT_NODE_RADIUS = 5.0

# Phyllotaxis placement for nodes without an initial position
INITIAL_RADIUS = 10.0

# Edge records
DEFAULT_EDGE_THRESHOLD = 150
DEFAULT_SOURCE_FIELD = "SOURCE_SUBREDDIT"
DEFAULT_TARGET_FIELD = "TARGET_SUBREDDIT"

# Delimiters inferred from the input file suffix
DELIMITERS_BY_SUFFIX: dict[str, str] = {
    ".csv": ",",
    ".tsv": "\t",
    ".tab": "\t",
    ".txt": "\t",
}
