"""Competency quiz content and scoring."""

from __future__ import annotations

from collections.abc import Sequence

from verification.schemas import QuizQuestion


PASSING_SCORE = 4

QUIZ_QUESTIONS: tuple[QuizQuestion, ...] = (
    QuizQuestion(
        prompt="What is the primary purpose of version control systems?",
        options=(
            "To design websites",
            "To track and manage source code changes",
            "To create databases",
            "To manage server configurations",
        ),
        correct_index=1,
    ),
    QuizQuestion(
        prompt="What does Git stand for?",
        options=(
            "Global Information Tracker",
            "Git is not an acronym",
            "Graphic Interface Tool",
            "General Integration Technique",
        ),
        correct_index=1,
    ),
    QuizQuestion(
        prompt="What is a pull request in GitHub?",
        options=(
            "A way to download code",
            "A method to merge code changes",
            "A type of Git command",
            "A server configuration",
        ),
        correct_index=1,
    ),
    QuizQuestion(
        prompt="What is open-source software?",
        options=(
            "Software that costs nothing",
            "Software with source code available to modify and distribute",
            "A type of operating system",
            "A programming language",
        ),
        correct_index=1,
    ),
    QuizQuestion(
        prompt="What is a repository in GitHub?",
        options=(
            "A type of database",
            "A project's file storage and version history",
            "A coding standard",
            "A type of server",
        ),
        correct_index=1,
    ),
)


def score_answers(answers: Sequence[int], questions: Sequence[QuizQuestion] = QUIZ_QUESTIONS) -> int:
    """Count answers matching the key; extra or missing answers score nothing."""
    return sum(
        1
        for question, chosen in zip(questions, answers)
        if chosen == question.correct_index
    )


def has_passed(correct_count: int, passing_score: int = PASSING_SCORE) -> bool:
    return correct_count >= passing_score
