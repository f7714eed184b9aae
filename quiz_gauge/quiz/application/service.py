from dataclasses import dataclass

from quiz_gauge.config import Difficulty, QuizConfig
from quiz_gauge.fsm import AppAction, AppState, AppStateMachine
from quiz_gauge.quiz.application.recorder import AttemptRecorder
from quiz_gauge.quiz.domain.errors import (
    AuthError,
    InvalidQuestionData,
    QuestionSourceUnavailable,
    SelectionEmpty,
)
from quiz_gauge.quiz.domain.models import (
    Question,
    QuizAttempt,
    QuizResult,
    UserProfile,
)
from quiz_gauge.quiz.domain.ports import IAuthProvider, IQuestionSource, IQuizStorage
from quiz_gauge.quiz.domain.progress import ProgressAggregator
from quiz_gauge.quiz.domain.question_bank import QuestionBank
from quiz_gauge.quiz.domain.question_selector import QuestionSelector
from quiz_gauge.quiz.domain.scoring import ReviewItem, ScoreCalculator
from quiz_gauge.quiz.domain.session import QuizSession
from quiz_gauge.shared.telemetry import Telemetry, measure_time


@dataclass
class AppContext:
    """
    Everything the screens read, owned by one QuizService.
    Acts as a 'Blackboard' for the running app.
    """

    profile: UserProfile | None = None
    difficulty: Difficulty = QuizConfig.DEFAULT_DIFFICULTY
    language: str = QuizConfig.FALLBACK_LANGUAGE
    warmup_question: Question | None = None
    session: QuizSession | None = None
    last_result: QuizResult | None = None


class QuizService:
    def __init__(
        self,
        bank: QuestionBank,
        storage: IQuizStorage,
        selector: QuestionSelector | None = None,
        recorder: AttemptRecorder | None = None,
        fsm: AppStateMachine | None = None,
    ) -> None:
        self.bank = bank
        self.storage = storage
        self.selector = selector or QuestionSelector()
        self.recorder = recorder or AttemptRecorder(storage)
        self.fsm = fsm or AppStateMachine()
        self.context = AppContext()
        self.telemetry = Telemetry("QuizService")

        self.context.warmup_question = self.selector.pick_random(bank.questions)

    # --- Properties ---

    @property
    def state(self) -> AppState:
        return self.fsm.current_state

    @property
    def profile(self) -> UserProfile | None:
        return self.context.profile

    @property
    def session(self) -> QuizSession | None:
        return self.context.session

    @property
    def last_result(self) -> QuizResult | None:
        return self.context.last_result

    @property
    def warmup_question(self) -> Question | None:
        return self.context.warmup_question

    @property
    def language(self) -> str:
        return self.context.language

    @property
    def question_pool_size(self) -> int:
        return self.bank.size

    # --- Startup ---

    @measure_time("restore")
    def restore(self) -> UserProfile | None:
        """Loads history, settings and a saved authenticated profile."""
        self.recorder.load()
        self.context.language = self.storage.get_language() or QuizConfig.FALLBACK_LANGUAGE

        saved = self.storage.get_user_profile()
        if saved is not None and not saved.is_guest:
            self.context.profile = saved
            self.fsm.transition(AppAction.SIGN_IN)
            self.telemetry.log_info("Profile restored", login=saved.login)
        return self.context.profile

    # --- Identity ---

    @measure_time("sign_in")
    def sign_in(self, auth: IAuthProvider) -> UserProfile | None:
        """
        Runs the external sign-in. Failures raise AuthError with the message
        to show; nothing else changes and nothing is retried.
        """
        Telemetry.start_trace()
        if not self.fsm.can(AppAction.SIGN_IN):
            self.telemetry.log_warning("Sign-in ignored", state=self.state.name)
            return self.context.profile

        try:
            user = auth.authenticate()
        except AuthError:
            raise
        except Exception as e:
            raise AuthError(str(e) or "Something went wrong.") from e

        profile = ProgressAggregator.for_login(self.context.profile, user)
        self.context.profile = profile
        self.storage.save_user_profile(profile)
        self.fsm.transition(AppAction.SIGN_IN)

        self.telemetry.log_info("Signed in", login=profile.login, streak=profile.streak)
        return profile

    def continue_as_guest(self) -> UserProfile | None:
        Telemetry.start_trace()
        if not self.fsm.transition(AppAction.CONTINUE_AS_GUEST):
            return self.context.profile

        self.context.profile = ProgressAggregator.guest()
        self.telemetry.log_info("Continuing as guest")
        return self.context.profile

    def sign_out(self) -> None:
        Telemetry.start_trace()
        if not self.fsm.transition(AppAction.SIGN_OUT):
            return

        login = self.context.profile.login if self.context.profile else None
        self.context.profile = None
        self.context.last_result = None
        self.storage.save_user_profile(None)
        self.telemetry.log_info("Signed out", login=login)

    # --- Home ---

    def set_difficulty(self, difficulty: Difficulty | str) -> None:
        self.context.difficulty = Difficulty(difficulty)

    def set_language(self, code: str) -> str:
        language = QuizConfig.normalize_language(code)
        self.context.language = language
        self.storage.save_language(language)
        return language

    def refresh_warmup(self) -> Question | None:
        """Draws a new warm-up question. An empty bank keeps the current one."""
        next_question = self.selector.pick_random(self.bank.questions)
        if next_question is not None:
            self.context.warmup_question = next_question
        return self.context.warmup_question

    # --- Quiz Flow ---

    @measure_time("start_quiz")
    def start_quiz(self) -> QuizSession | None:
        """Raises SelectionEmpty when the bank has nothing to offer."""
        return self._begin(AppAction.START_QUIZ)

    @measure_time("retry_quiz")
    def retry_quiz(self) -> QuizSession | None:
        return self._begin(AppAction.RETRY_QUIZ)

    def _begin(self, action: AppAction) -> QuizSession | None:
        Telemetry.start_trace()
        if not self.fsm.can(action):
            self.telemetry.log_warning(
                "Quiz start ignored", action=action.name, state=self.state.name
            )
            return self.context.session

        difficulty = self.context.difficulty
        questions = self.selector.pick_for_difficulty(difficulty, self.bank.questions)
        if not questions:
            self.telemetry.log_warning(
                "No questions available", difficulty=difficulty.value
            )
            raise SelectionEmpty(difficulty.value)

        session = QuizSession(questions, difficulty)
        self.context.session = session
        self.context.last_result = None
        self.fsm.transition(action)

        self.telemetry.log_info(
            "Quiz started", difficulty=difficulty.value, questions=session.total
        )
        return session

    def select_option(self, index: int) -> None:
        session = self._active_session("select_option")
        if session:
            session.select_option(index)

    def submit(self) -> None:
        session = self._active_session("submit")
        if session:
            session.submit()

    def advance(self) -> QuizResult | None:
        """Submit-then-advance. Returns the result when the session completes."""
        session = self._active_session("advance")
        if session is None:
            return None

        answers = session.advance()
        if answers is None:
            return None
        return self._complete(session)

    def retreat(self) -> bool:
        """Steps back; on the first question this exits the quiz. Returns True on exit."""
        session = self._active_session("retreat")
        if session is None:
            return False

        if session.retreat():
            self.exit_quiz()
            return True
        return False

    def exit_quiz(self) -> None:
        """Aborts the session. Nothing is persisted."""
        if not self.fsm.transition(AppAction.EXIT_QUIZ):
            return

        session = self.context.session
        self.context.session = None
        self.telemetry.log_info(
            "Quiz aborted", answered=len(session.answers) if session else 0
        )
        self.refresh_warmup()

    @measure_time("complete_quiz")
    def _complete(self, session: QuizSession) -> QuizResult:
        answers = tuple(session.ordered_answers())
        score = ScoreCalculator.overall(session.questions, answers)
        topics = tuple(ScoreCalculator.by_topic(session.questions, answers))

        prior = self.context.profile or ProgressAggregator.guest()
        profile = ProgressAggregator.apply_session(prior, answers)
        self.context.profile = profile

        # Recording and saving swallow storage failures; the result stands.
        attempt = self.recorder.record_attempt(
            session, profile.mode, profile.login, profile.streak
        )
        if not profile.is_guest:
            self.storage.save_user_profile(profile)

        result = QuizResult(
            questions=session.questions,
            answers=answers,
            score=score,
            topics=topics,
            difficulty=session.difficulty,
            attempt=attempt,
        )
        self.context.last_result = result
        self.context.session = None
        self.fsm.transition(AppAction.COMPLETE_QUIZ)

        Telemetry.count_session_completed(session.difficulty.value)
        self.telemetry.log_info(
            "Quiz completed",
            score=f"{score.correct}/{score.total}",
            percentage=score.percentage,
            answered=profile.answered,
        )
        self.refresh_warmup()
        return result

    def _active_session(self, action: str) -> QuizSession | None:
        if self.state != AppState.QUIZ or self.context.session is None:
            self.telemetry.log_warning(
                f"⛔ No active session for {action}", state=self.state.name
            )
            return None
        return self.context.session

    # --- Results & History ---

    def review_answers(self) -> list[ReviewItem]:
        result = self.context.last_result
        if result is None or not self.fsm.transition(AppAction.REVIEW_ANSWERS):
            return []
        return ScoreCalculator.review(result.questions, result.answers)

    def go_home(self) -> None:
        self.fsm.transition(AppAction.GO_HOME)

    def history(self) -> list[QuizAttempt]:
        return self.recorder.history()

    def review_attempt(self, attempt: QuizAttempt) -> list[ReviewItem]:
        return ScoreCalculator.review(attempt.questions, attempt.answers)

    def clear_history(self) -> None:
        Telemetry.start_trace()
        self.recorder.clear()

    # --- Question Bank ---

    def replace_questions(self, questions: list[Question]) -> bool:
        """Swaps the bank wholesale. Rejected input keeps the prior bank."""
        try:
            self.bank.replace(questions)
        except InvalidQuestionData as e:
            self.telemetry.log_error("Question bank replacement rejected", e)
            return False

        self.refresh_warmup()
        return True

    @measure_time("refresh_questions")
    def refresh_questions(self, source: IQuestionSource) -> bool:
        try:
            questions = source.fetch()
        except (QuestionSourceUnavailable, InvalidQuestionData) as e:
            self.telemetry.log_warning(
                "Unable to load latest questions, keeping current bank",
                error=str(e),
                size=self.bank.size,
            )
            return False
        return self.replace_questions(questions)
