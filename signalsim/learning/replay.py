import random
from collections import deque
from typing import Deque, List
from signalsim.domain.models import Experience

class ReplayBuffer:
    def __init__(self, capacity: int):
        self.buffer: Deque[Experience] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self.buffer)

    def add(self, experience: Experience):
        self.buffer.append(experience)

    def sample(self, rng: random.Random, batch_size: int) -> List[Experience]:
        # With replacement, so a small buffer can still fill a batch
        if not self.buffer:
            return []
        return [self.buffer[rng.randrange(len(self.buffer))] for _ in range(batch_size)]
