"""
Submission State Machine for validating order/invoice submission steps.

This module implements a finite state machine so a submission attempt can only
move forward through its steps, and logs every step for auditing.
"""

import logging
from typing import Dict, List, Set

from enums.submission_kind import SubmissionKind
from enums.submission_state import SubmissionState
from exceptions.order import InvalidSubmissionStateException

logger = logging.getLogger(__name__)

ALL_KINDS = frozenset(SubmissionKind)


class SubmissionTransition:
    """Represents a valid state transition with metadata"""

    def __init__(self, from_state: SubmissionState, to_state: SubmissionState,
                 kinds: frozenset = ALL_KINDS, description: str = ""):
        self.from_state = from_state
        self.to_state = to_state
        self.kinds = kinds
        self.description = description

    def __repr__(self):
        kinds = "" if self.kinds == ALL_KINDS else f" ({', '.join(k.value for k in self.kinds)})"
        return f"{self.from_state.value} -> {self.to_state.value}{kinds}"


class SubmissionStateMachine:
    """
    Finite state machine for submission attempts.

    Order path:
    - IDLE -> VALIDATING -> RESOLVING_FALLBACKS -> BUILDING_PAYLOAD -> SUBMITTING -> CONFIRMING -> SUCCEEDED
      (RESOLVING_FALLBACKS is skipped when address and warehouse are already known)

    Direct invoice path:
    - IDLE -> VALIDATING -> BUILDING_PAYLOAD -> SUBMITTING -> SUCCEEDED

    Any non-terminal step after IDLE may go to FAILED. SUCCEEDED and FAILED are
    final; a retry is a new attempt starting at IDLE. No state is re-entered.
    """

    ORDER_ONLY = frozenset({SubmissionKind.ORDER})
    INVOICE_ONLY = frozenset({SubmissionKind.DIRECT_INVOICE})

    VALID_TRANSITIONS: List[SubmissionTransition] = [
        SubmissionTransition(
            SubmissionState.IDLE,
            SubmissionState.VALIDATING,
            description="Submission started"
        ),

        # From VALIDATING
        SubmissionTransition(
            SubmissionState.VALIDATING,
            SubmissionState.RESOLVING_FALLBACKS,
            kinds=ORDER_ONLY,
            description="Filling missing address/warehouse"
        ),
        SubmissionTransition(
            SubmissionState.VALIDATING,
            SubmissionState.BUILDING_PAYLOAD,
            description="Required fields present, no fallback needed"
        ),
        SubmissionTransition(
            SubmissionState.VALIDATING,
            SubmissionState.FAILED,
            description="Required data missing"
        ),

        # From RESOLVING_FALLBACKS
        SubmissionTransition(
            SubmissionState.RESOLVING_FALLBACKS,
            SubmissionState.BUILDING_PAYLOAD,
            kinds=ORDER_ONLY,
            description="All required fields resolved"
        ),
        SubmissionTransition(
            SubmissionState.RESOLVING_FALLBACKS,
            SubmissionState.FAILED,
            kinds=ORDER_ONLY,
            description="Required fields still missing after fallbacks"
        ),

        # From BUILDING_PAYLOAD
        SubmissionTransition(
            SubmissionState.BUILDING_PAYLOAD,
            SubmissionState.SUBMITTING,
            description="Payload frozen, sending to backend"
        ),
        SubmissionTransition(
            SubmissionState.BUILDING_PAYLOAD,
            SubmissionState.FAILED,
            description="Payload could not be built"
        ),

        # From SUBMITTING
        SubmissionTransition(
            SubmissionState.SUBMITTING,
            SubmissionState.CONFIRMING,
            kinds=ORDER_ONLY,
            description="Order created remotely"
        ),
        SubmissionTransition(
            SubmissionState.SUBMITTING,
            SubmissionState.SUCCEEDED,
            kinds=INVOICE_ONLY,
            description="Invoice created remotely"
        ),
        SubmissionTransition(
            SubmissionState.SUBMITTING,
            SubmissionState.FAILED,
            description="Backend rejected the submission or returned no id"
        ),

        # From CONFIRMING
        SubmissionTransition(
            SubmissionState.CONFIRMING,
            SubmissionState.SUCCEEDED,
            kinds=ORDER_ONLY,
            description="Order confirmed (or confirmation skipped with a warning)"
        ),
    ]

    FINAL_STATES = frozenset({SubmissionState.SUCCEEDED, SubmissionState.FAILED})

    _transition_map: Dict[tuple, SubmissionTransition] = {}

    @classmethod
    def _build_transition_map(cls):
        """Build internal transition map for fast lookup"""
        if cls._transition_map:
            return
        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map[(transition.from_state, transition.to_state)] = transition

    @classmethod
    def is_valid_transition(cls, kind: SubmissionKind, from_state: SubmissionState,
                            to_state: SubmissionState) -> bool:
        """
        Check if a state transition is valid for a submission kind.

        Args:
            kind: Order or direct invoice
            from_state: Current state
            to_state: Desired next state

        Returns:
            True if transition is valid, False otherwise
        """
        cls._build_transition_map()
        transition = cls._transition_map.get((from_state, to_state))
        return transition is not None and kind in transition.kinds

    @classmethod
    def get_valid_transitions(cls, kind: SubmissionKind, from_state: SubmissionState) -> Set[SubmissionState]:
        cls._build_transition_map()
        return {
            to_state for (state, to_state), transition in cls._transition_map.items()
            if state == from_state and kind in transition.kinds
        }

    @classmethod
    def get_transition_description(cls, from_state: SubmissionState, to_state: SubmissionState) -> str:
        cls._build_transition_map()
        transition = cls._transition_map.get((from_state, to_state))
        if transition is None:
            return f"Transition from {from_state.value} to {to_state.value}"
        return transition.description

    @classmethod
    def is_final_state(cls, state: SubmissionState) -> bool:
        return state in cls.FINAL_STATES


class SubmissionTracker:
    """
    Current state of one submission attempt.

    Usage:
        tracker = SubmissionTracker(SubmissionKind.ORDER, customer_id)
        tracker.advance(SubmissionState.VALIDATING)
    """

    def __init__(self, kind: SubmissionKind, customer_id=None):
        self.kind = kind
        self.customer_id = customer_id
        self.state = SubmissionState.IDLE
        self.history: list[SubmissionState] = [SubmissionState.IDLE]

    @property
    def is_final(self) -> bool:
        return SubmissionStateMachine.is_final_state(self.state)

    def advance(self, to_state: SubmissionState) -> SubmissionState:
        """
        Move to the next state and write an audit log line.

        Raises:
            InvalidSubmissionStateException: The transition is not allowed for this kind
        """
        if not SubmissionStateMachine.is_valid_transition(self.kind, self.state, to_state):
            logger.error(
                f"Invalid submission transition for customer {self.customer_id}: "
                f"{self.state.value} -> {to_state.value} ({self.kind.value})"
            )
            raise InvalidSubmissionStateException(self.state.value, to_state.value)

        description = SubmissionStateMachine.get_transition_description(self.state, to_state)
        logger.info(
            f"SUBMISSION_TRANSITION: {self.kind.value} for customer {self.customer_id} "
            f"{self.state.value} -> {to_state.value}: {description}"
        )
        self.state = to_state
        self.history.append(to_state)
        return to_state
