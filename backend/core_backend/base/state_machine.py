"""
A small, explicit state machine used by orders, tables and bookings.

Each machine declares its states, the allowed edges between them and
optional entry actions. Entry actions receive the instance, the state it is
leaving and any keyword context passed to ``apply``; they mutate the
instance in memory and never save it, so the caller stays in control of the
write and its transaction.
"""
import logging
from collections import defaultdict

from core_backend.exceptions import InvalidTransitionError, ValidationError

logger = logging.getLogger(__name__)


class StateMachine:
    def __init__(self, name, transitions, field="status", allow_same_state=False):
        """
        Args:
            name: Label used in log messages.
            transitions: Mapping of state -> iterable of reachable states.
                Every state must appear as a key; terminal states map to an
                empty iterable.
            field: Attribute on the instance that holds the status.
            allow_same_state: When True, writing the current state again is
                accepted as a no-op instead of an invalid transition.
        """
        self.name = name
        self.field = field
        self.allow_same_state = allow_same_state
        self.transitions = {
            state: frozenset(targets) for state, targets in transitions.items()
        }
        self._entry_actions = defaultdict(list)

        unknown = {
            target
            for targets in self.transitions.values()
            for target in targets
            if target not in self.transitions
        }
        if unknown:
            raise ValueError(f"{name}: transitions reference unknown states {sorted(unknown)}")

    @property
    def states(self):
        return frozenset(self.transitions)

    def allowed_targets(self, state):
        return self.transitions.get(state, frozenset())

    def is_terminal(self, state):
        return not self.allowed_targets(state)

    def can_transition(self, from_state, to_state):
        if from_state == to_state and self.allow_same_state:
            return True
        return to_state in self.allowed_targets(from_state)

    def validate(self, from_state, to_state):
        if to_state not in self.transitions:
            raise ValidationError(
                f"'{to_state}' is not a valid {self.name} status",
                {"allowed": sorted(self.transitions)},
            )
        if not self.can_transition(from_state, to_state):
            raise InvalidTransitionError(from_state, to_state)

    def on_enter(self, *states):
        """Decorator registering an entry action for one or more states."""

        def decorator(func):
            for state in states:
                if state not in self.transitions:
                    raise ValueError(f"{self.name}: unknown state '{state}'")
                self._entry_actions[state].append(func)
            return func

        return decorator

    def apply(self, instance, to_state, **context):
        """
        Move ``instance`` to ``to_state`` and run its entry actions.

        Returns the previous state. Raises InvalidTransitionError when the
        edge is not allowed.
        """
        from_state = getattr(instance, self.field)
        self.validate(from_state, to_state)

        return self.enter(instance, to_state, **context)

    def enter(self, instance, to_state, **context):
        """
        Set ``to_state`` and run its entry actions without checking the edge.

        For operations that enforce their own preconditions on top of the
        transition table (e.g. occupying a table for a new order).
        """
        if to_state not in self.transitions:
            raise ValidationError(f"'{to_state}' is not a valid {self.name} status")

        from_state = getattr(instance, self.field)
        setattr(instance, self.field, to_state)
        for action in self._entry_actions.get(to_state, []):
            action(instance, from_state, **context)

        logger.debug(
            "%s %s: %s -> %s", self.name, getattr(instance, "pk", None), from_state, to_state
        )
        return from_state
