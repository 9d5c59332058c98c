"""Conditional question-flow engine for the eligibility wizard."""

from .answers import Answer, Multi, Scalar, build_answer_map  # noqa: F401
from .conditions import evaluate  # noqa: F401
from .errors import AnswerSaveError, QuestionSetError, WizardError  # noqa: F401
from .flow import FlowNavigator  # noqa: F401
from .progress import Progress, calculate_progress  # noqa: F401
from .questionnaire_utils import Condition, Question, parse_question_set  # noqa: F401
from .resume import ResumeCoordinator, ResumeResult  # noqa: F401
from .visibility import compute_visibility  # noqa: F401
