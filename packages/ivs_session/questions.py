from typing import Tuple
from .dto import Question, QuestionKind

FIXED_QUESTIONS: Tuple[Question, ...] = (
    Question(
        id="1",
        text="Tell me about a time when you had to work with a difficult team member. How did you handle the situation?",
        kind=QuestionKind.BEHAVIORAL,
        category="Teamwork",
    ),
    Question(
        id="2",
        text="Describe a project where you had to meet a tight deadline. How did you manage your time and resources?",
        kind=QuestionKind.BEHAVIORAL,
        category="Time Management",
    ),
    Question(
        id="3",
        text="Can you walk through your approach to solving a complex problem? Share a specific example.",
        kind=QuestionKind.BEHAVIORAL,
        category="Problem Solving",
    ),
    Question(
        id="4",
        text="Tell me about a time you received critical feedback. How did you respond to it?",
        kind=QuestionKind.BEHAVIORAL,
        category="Growth Mindset",
    ),
    Question(
        id="5",
        text="Describe a situation where you had to make a difficult decision with limited information.",
        kind=QuestionKind.BEHAVIORAL,
        category="Decision Making",
    ),
    Question(
        id="6",
        text="Explain the difference between useMemo and useCallback in React, and when you would use each.",
        kind=QuestionKind.TECHNICAL,
        category="React",
    ),
    Question(
        id="7",
        text="How would you optimize the performance of a React application that is rendering slowly?",
        kind=QuestionKind.TECHNICAL,
        category="Performance",
    ),
    Question(
        id="8",
        text="Explain how you would implement authentication in a React application.",
        kind=QuestionKind.TECHNICAL,
        category="Security",
    ),
    Question(
        id="9",
        text="What is the virtual DOM in React, and how does it improve performance?",
        kind=QuestionKind.TECHNICAL,
        category="React Fundamentals",
    ),
    Question(
        id="10",
        text="Describe the difference between server-side rendering and client-side rendering. What are the pros and cons of each?",
        kind=QuestionKind.TECHNICAL,
        category="Web Architecture",
    ),
)

class FixedQuestionSource:
    """
    Static question set used when setup is skipped. No network call.
    """
    def __init__(self, questions: Tuple[Question, ...] = FIXED_QUESTIONS):
        self.questions = tuple(questions)

    def load(self) -> Tuple[Question, ...]:
        return self.questions
