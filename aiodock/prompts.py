"""Operator decisions: pre-collected answers plus a prompter for the ones left open."""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class OperatorChoices:
    """Answers collected before the run. None means 'ask when it comes up'."""

    confirm_reset: bool | None = None
    create_backup: bool | None = None
    accept_warnings: bool | None = None
    run_health_checks: bool | None = None
    manual_ip: str | None = None

    @classmethod
    def assume_yes(cls, manual_ip=None, run_health_checks=True, create_backup=True) -> "OperatorChoices":
        """Answer every confirmation affirmatively (--yes)."""
        return cls(
            confirm_reset=True,
            create_backup=create_backup,
            accept_warnings=True,
            run_health_checks=run_health_checks,
            manual_ip=manual_ip,
        )


class Prompter:
    """Asks the operator on the terminal."""

    def __init__(self, input_fn=input):
        self.input_fn = input_fn

    def confirm(self, question) -> bool:
        answer = self.input_fn(f"{question} (y/n): ")
        return answer.strip().lower() in ("y", "yes")

    def confirm_word(self, question, word="yes") -> bool:
        """Stricter confirmation for destructive actions: the exact word must be typed."""
        answer = self.input_fn(f"{question} Type '{word}' to continue: ")
        return answer.strip() == word

    def ask(self, question) -> str | None:
        answer = self.input_fn(question).strip()
        return answer or None


class NonInteractivePrompter(Prompter):
    """Declines everything. Used when stdin is not a terminal."""

    def __init__(self):
        super().__init__(input_fn=None)

    def confirm(self, question) -> bool:
        logger.info(f"{question} -> no (non-interactive)")
        return False

    def confirm_word(self, question, word="yes") -> bool:
        return self.confirm(question)

    def ask(self, question) -> str | None:
        logger.info(f"{question.strip()} -> (no answer, non-interactive)")
        return None


def decide(answer, prompter, question) -> bool:
    """Use a pre-collected answer if there is one, otherwise ask."""
    if answer is not None:
        return answer
    return prompter.confirm(question)
