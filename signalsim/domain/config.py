# Simulation Configuration
# Defaults for the pydantic config models live here so experiments can
# read or patch a single module.

# World Settings (screen coordinates, y grows downward)
WORLD_WIDTH = 600.0
WORLD_HEIGHT = 400.0
CENTER_X = 300.0
CENTER_Y = 200.0

# Intersection Geometry
INTERSECTION_HALF_SIZE = 50.0   # Half width of the box around the center
STOP_LINE_NEAR = 60.0           # Stop-line band, distance before the center
STOP_LINE_FAR = 70.0
INNER_LANE_OFFSET = 10.0        # Left lane, measured from the center line
OUTER_LANE_OFFSET = 30.0        # Right lane

# Signal Timings
GREEN_DURATION = 20.0
YELLOW_DURATION = 5.0
ADAPTIVE_THRESHOLD = 1.5
ADAPTIVE_MIN_GREEN_TIME = 3.0
ADAPTIVE_MAX_WAIT_TIME = 20.0

# Traffic Generation
SPAWN_RATE = 0.3          # arrivals/s before the time multiplier
SIMULATION_SPEED = 1.0
TRUCK_PROBABILITY = 0.2
LEFT_LANE_PROBABILITY = 0.5
VEHICLE_COLORS = ["#2196F3", "#9C27B0", "#FF9800", "#E91E63"]

# Vehicle Kinematics
VEHICLE_SPEED = {"car": 40.0, "truck": 30.0}
VEHICLE_SIZE = {"car": 20.0, "truck": 30.0}
FOLLOWING_BUFFER = 5.0

# Density Weighting
DENSITY_DECAY_RATE = 0.008
DENSITY_MAX_DISTANCE = 200.0
DENSITY_MIN_WEIGHT = 0.2

# Adaptive Controller
HISTORY_LENGTH = 10
HISTORY_WINDOW = 10.0     # Seconds a sample stays in the history
RECENT_SAMPLE_WEIGHT = 1.5

# Q-Learning Controller
LEARNING_RATE = 0.1
DISCOUNT_FACTOR = 0.9
EXPLORATION_RATE = 0.2
MIN_EXPLORATION_RATE = 0.05
EXPLORATION_DECAY_TIME = 500.0
REPLAY_CAPACITY = 100
REPLAY_INTERVAL = 10      # Ticks between replay rounds
REPLAY_BATCH_SIZE = 5
REPLAY_MIN_SIZE = 10
REWARD_HISTORY_LENGTH = 100
TRAFFIC_LOW_THRESHOLD = 1.5
TRAFFIC_HIGH_THRESHOLD = 4.0
PHASE_SHORT_THRESHOLD = 5.0
PHASE_LONG_THRESHOLD = 15.0
EXTEND_TIMER_CAP = 2.0
NEARBY_RADIUS = 100.0

# Reward Shaping
REWARD_THROUGHPUT_WEIGHT = 2.0
REWARD_WAIT_WEIGHT = 0.8
REWARD_NEARBY_WEIGHT = 0.5
REWARD_LONG_WAIT_WEIGHT = 0.02
REWARD_LONG_WAIT_EXPONENT = 1.5

# Throughput Heuristic
THROUGHPUT_SPAWN_FACTOR = 0.8
THROUGHPUT_WAIT_PENALTY = 0.15
THROUGHPUT_ACTIVE_BONUS = 0.5
THROUGHPUT_ACTIVE_BONUS_CAP = 10.0
