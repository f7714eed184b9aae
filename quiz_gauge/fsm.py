import logging
from enum import Enum, auto

logger = logging.getLogger(__name__)


class AppState(Enum):
    SIGNED_OUT = auto()  # Login screen, no profile
    HOME = auto()  # Difficulty picker, warm-up question, stats
    QUIZ = auto()  # A session is in progress
    SCORE = auto()  # Session finished, score breakdown shown
    REVIEW = auto()  # Per-question answer review


class AppAction(Enum):
    SIGN_IN = auto()
    CONTINUE_AS_GUEST = auto()
    START_QUIZ = auto()
    EXIT_QUIZ = auto()
    COMPLETE_QUIZ = auto()
    REVIEW_ANSWERS = auto()
    RETRY_QUIZ = auto()
    GO_HOME = auto()
    SIGN_OUT = auto()


class AppStateMachine:
    """
    Pure FSM Logic for the screen flow.
    It only cares about State Transitions, not sessions or storage.
    """

    def __init__(self, initial_state: AppState = AppState.SIGNED_OUT) -> None:
        self._state = initial_state

    @property
    def current_state(self) -> AppState:
        return self._state

    def can(self, action: AppAction) -> bool:
        return self._next_state(action) is not None

    def transition(self, action: AppAction) -> bool:
        """
        Applies the action. Invalid transitions are logged and ignored.
        Returns whether the action was accepted.
        """
        previous = self._state
        target = self._next_state(action)

        if target is None:
            logger.warning(f"⛔ INVALID TRANSITION: {self._state.name} + {action.name}")
            return False

        self._state = target
        logger.info(f"🔄 FSM: {previous.name} --[{action.name}]--> {self._state.name}")
        return True

    def _next_state(self, action: AppAction) -> AppState | None:
        """The Transition Table."""
        match (self._state, action):
            # SIGNED_OUT -> HOME
            case (AppState.SIGNED_OUT, AppAction.SIGN_IN | AppAction.CONTINUE_AS_GUEST):
                return AppState.HOME

            # Guests may upgrade from any non-quiz screen
            case (AppState.HOME | AppState.SCORE | AppState.REVIEW, AppAction.SIGN_IN):
                return AppState.HOME

            # HOME -> QUIZ
            case (AppState.HOME, AppAction.START_QUIZ):
                return AppState.QUIZ

            # QUIZ -> HOME (abort) or SCORE (finish)
            case (AppState.QUIZ, AppAction.EXIT_QUIZ):
                return AppState.HOME
            case (AppState.QUIZ, AppAction.COMPLETE_QUIZ):
                return AppState.SCORE

            # SCORE / REVIEW
            case (AppState.SCORE, AppAction.REVIEW_ANSWERS):
                return AppState.REVIEW
            case (AppState.SCORE | AppState.REVIEW, AppAction.RETRY_QUIZ):
                return AppState.QUIZ
            case (AppState.SCORE | AppState.REVIEW, AppAction.GO_HOME):
                return AppState.HOME

            # SIGN_OUT from anywhere but an open session
            case (state, AppAction.SIGN_OUT) if state not in (
                AppState.SIGNED_OUT,
                AppState.QUIZ,
            ):
                return AppState.SIGNED_OUT

            case _:
                return None
