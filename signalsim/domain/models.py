from enum import Enum
from typing import List, Optional, Dict
from pydantic import BaseModel, Field

from signalsim.domain import config

class SignalState(str, Enum):
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"

class Direction(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

class Axis(str, Enum):
    NS = "ns"
    EW = "ew"

    @property
    def opposite(self) -> "Axis":
        return Axis.EW if self is Axis.NS else Axis.NS

class VehicleType(str, Enum):
    CAR = "car"
    TRUCK = "truck"

class Lane(str, Enum):
    LEFT = "left"
    RIGHT = "right"

class ControllerType(str, Enum):
    FIXED = "fixed"
    ADAPTIVE = "adaptive"
    REINFORCEMENT = "reinforcement"

class Position(BaseModel):
    x: float
    y: float

class Vehicle(BaseModel):
    id: str
    type: VehicleType
    position: Position
    direction: Direction
    lane: Lane
    speed: float
    waitTime: float = 0.0
    color: str = config.VEHICLE_COLORS[0] # Display only

class TrafficLight(BaseModel):
    id: str  # e.g., "light-north"
    direction: Direction
    state: SignalState
    timer: float = 0.0

class DirectionalDensity(BaseModel):
    north: float = 0.0
    south: float = 0.0
    east: float = 0.0
    west: float = 0.0

    @property
    def ns(self) -> float:
        return self.north + self.south

    @property
    def ew(self) -> float:
        return self.east + self.west

class Statistics(BaseModel):
    totalVehicles: int = 0
    activeVehicles: int = 0
    averageWaitTime: float = 0.0
    throughput: float = 0.0
    trafficDensity: DirectionalDensity = Field(default_factory=DirectionalDensity)
    efficiencyScore: float = 0.0
    nsShare: float = 50.0

# Tunables

class DensityTuning(BaseModel):
    decay_rate: float = config.DENSITY_DECAY_RATE
    max_distance: float = config.DENSITY_MAX_DISTANCE
    min_weight: float = config.DENSITY_MIN_WEIGHT

class AdaptiveTuning(BaseModel):
    history_length: int = Field(config.HISTORY_LENGTH, ge=1)
    history_window: float = Field(config.HISTORY_WINDOW, gt=0)
    recent_weight: float = config.RECENT_SAMPLE_WEIGHT
    trend_threshold: Optional[float] = None # Trend trigger is off unless set

class LearningTuning(BaseModel):
    learning_rate: float = config.LEARNING_RATE
    discount_factor: float = config.DISCOUNT_FACTOR
    exploration_rate: float = config.EXPLORATION_RATE
    min_exploration_rate: float = config.MIN_EXPLORATION_RATE
    exploration_decay_time: float = Field(config.EXPLORATION_DECAY_TIME, gt=0)
    replay_capacity: int = Field(config.REPLAY_CAPACITY, ge=1)
    replay_interval: int = Field(config.REPLAY_INTERVAL, ge=1)
    replay_batch_size: int = Field(config.REPLAY_BATCH_SIZE, ge=0)
    replay_min_size: int = config.REPLAY_MIN_SIZE
    reward_history_length: int = Field(config.REWARD_HISTORY_LENGTH, ge=1)
    traffic_low_threshold: float = config.TRAFFIC_LOW_THRESHOLD
    traffic_high_threshold: float = config.TRAFFIC_HIGH_THRESHOLD
    phase_short_threshold: float = config.PHASE_SHORT_THRESHOLD
    phase_long_threshold: float = config.PHASE_LONG_THRESHOLD
    extend_timer_cap: float = config.EXTEND_TIMER_CAP
    nearby_radius: float = config.NEARBY_RADIUS
    reward_throughput_weight: float = config.REWARD_THROUGHPUT_WEIGHT
    reward_wait_weight: float = config.REWARD_WAIT_WEIGHT
    reward_nearby_weight: float = config.REWARD_NEARBY_WEIGHT
    reward_long_wait_weight: float = config.REWARD_LONG_WAIT_WEIGHT
    reward_long_wait_exponent: float = config.REWARD_LONG_WAIT_EXPONENT

class ThroughputTuning(BaseModel):
    spawn_factor: float = config.THROUGHPUT_SPAWN_FACTOR
    wait_penalty: float = config.THROUGHPUT_WAIT_PENALTY
    active_bonus: float = config.THROUGHPUT_ACTIVE_BONUS
    active_bonus_cap: float = config.THROUGHPUT_ACTIVE_BONUS_CAP

class Tuning(BaseModel):
    density: DensityTuning = Field(default_factory=DensityTuning)
    adaptive: AdaptiveTuning = Field(default_factory=AdaptiveTuning)
    learning: LearningTuning = Field(default_factory=LearningTuning)
    throughput: ThroughputTuning = Field(default_factory=ThroughputTuning)

# Configuration

class AIParams(BaseModel):
    greenDuration: float = Field(config.GREEN_DURATION, gt=0)
    yellowDuration: float = Field(config.YELLOW_DURATION, gt=0)
    adaptiveThreshold: float = Field(config.ADAPTIVE_THRESHOLD, gt=0)
    adaptiveMinGreenTime: float = Field(config.ADAPTIVE_MIN_GREEN_TIME, ge=0)
    adaptiveMaxWaitTime: float = Field(config.ADAPTIVE_MAX_WAIT_TIME, gt=0)

class AIParamsUpdate(BaseModel):
    greenDuration: Optional[float] = Field(None, gt=0)
    yellowDuration: Optional[float] = Field(None, gt=0)
    adaptiveThreshold: Optional[float] = Field(None, gt=0)
    adaptiveMinGreenTime: Optional[float] = Field(None, ge=0)
    adaptiveMaxWaitTime: Optional[float] = Field(None, gt=0)

class SimulationConfig(BaseModel):
    spawnRate: float = Field(config.SPAWN_RATE, ge=0)
    simulationSpeed: float = Field(config.SIMULATION_SPEED, ge=0)
    aiController: ControllerType = ControllerType.FIXED
    aiParams: AIParams = Field(default_factory=AIParams)
    tuning: Tuning = Field(default_factory=Tuning)

# Policy State

class DensitySample(BaseModel):
    timestamp: float
    ns: float
    ew: float

class AdaptivePhase(str, Enum):
    GREEN = "green"
    CLEARANCE = "clearance"

class AdaptivePolicyState(BaseModel):
    history: List[DensitySample] = []
    current_axis: Optional[Axis] = None
    target_axis: Optional[Axis] = None
    phase: AdaptivePhase = AdaptivePhase.GREEN
    last_switch_time: Optional[float] = None
    switch_timer: float = 0.0

class Experience(BaseModel):
    state: str
    action: str
    reward: float
    next_state: str

class LearningPolicyState(BaseModel):
    exploration_rate: float = config.EXPLORATION_RATE
    last_state_key: Optional[str] = None
    last_action: Optional[str] = None
    update_counter: int = 0
    reward_history: List[float] = []
    replay_rounds: int = 0

# Learned-policy persistence

QTableMapping = Dict[str, Dict[str, float]]
