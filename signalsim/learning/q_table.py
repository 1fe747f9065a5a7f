from typing import Dict, Iterable, List, Optional
from pydantic import TypeAdapter
from signalsim.domain.models import QTableMapping

_mapping_adapter = TypeAdapter(QTableMapping)

class QTable:
    """State-key -> {action -> value} table for one-step Q-learning.

    Action order is fixed at construction; greedy ties resolve to the
    earliest action in that order.
    """

    def __init__(self, actions: Iterable[str], values: Optional[QTableMapping] = None):
        self.actions: List[str] = list(actions)
        self.values: Dict[str, Dict[str, float]] = {}
        if values:
            self.merge(values)

    def __len__(self) -> int:
        return len(self.values)

    def ensure(self, state_key: str) -> Dict[str, float]:
        row = self.values.get(state_key)
        if row is None:
            row = {action: 0.0 for action in self.actions}
            self.values[state_key] = row
        return row

    def value(self, state_key: str, action: str) -> float:
        return self.values.get(state_key, {}).get(action, 0.0)

    def max_value(self, state_key: str) -> float:
        row = self.values.get(state_key)
        if not row:
            return 0.0
        return max(row.values())

    def best_action(self, state_key: str) -> str:
        row = self.ensure(state_key)
        best = self.actions[0]
        best_value = row.get(best, 0.0)
        for action in self.actions:
            if row.get(action, 0.0) > best_value:
                best = action
                best_value = row[action]
        return best

    def update(self, state_key: str, action: str, reward: float, next_state_key: str,
               learning_rate: float, discount_factor: float) -> float:
        row = self.ensure(state_key)
        old_value = row.get(action, 0.0)
        target = reward + discount_factor * self.max_value(next_state_key)
        row[action] = old_value + learning_rate * (target - old_value)
        return row[action]

    def merge(self, mapping: QTableMapping):
        validated = _mapping_adapter.validate_python(mapping)
        for state_key, row in validated.items():
            target = self.ensure(state_key)
            target.update({a: v for a, v in row.items() if a in self.actions})

    def to_mapping(self) -> QTableMapping:
        return {state_key: dict(row) for state_key, row in self.values.items()}

    @classmethod
    def from_mapping(cls, actions: Iterable[str], mapping: QTableMapping) -> "QTable":
        return cls(actions, mapping)

def dump_q_table(table: QTable) -> bytes:
    return _mapping_adapter.dump_json(table.to_mapping())

def load_q_table(actions: Iterable[str], data) -> QTable:
    return QTable(actions, _mapping_adapter.validate_json(data))
