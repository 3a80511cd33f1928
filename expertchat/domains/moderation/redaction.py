# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Blocklist-based profanity redaction.

Each word token (``\\w+``) whose lowercase form is in the blocklist is
replaced by the mask character repeated to the token's length, so the
redacted text always has the same length as the input.

Example:
    >>> redactor = Redactor(["idiot"])
    >>> redactor.redact("you idiot")
    RedactionResult(text='you #####', violated=True, offending_token='idiot')
"""

import re
from dataclasses import dataclass
from typing import Iterable

from expertchat.core.config.settings import ModerationSettings
from expertchat.core.config.yaml_loader import load_word_list

WORD_PATTERN = re.compile(r"\w+")


@dataclass(frozen=True)
class RedactionResult:
    """Outcome of redacting one message.

    Attributes:
        text: Text with every blocklisted token masked.
        violated: Whether any token was masked.
        offending_token: First whitespace-separated token of the original
            text containing a blocklisted word, None when not violated.
    """

    text: str
    violated: bool
    offending_token: str | None = None


class Redactor:
    """Masks blocklisted words in free text.

    Immutable after construction and safe to share across requests.
    """

    def __init__(self, words: Iterable[str], mask_char: str = "#") -> None:
        """Initialize the redactor.

        Args:
            words: Blocklisted words, matched case-insensitively.
            mask_char: Single non-word, non-space character used for masking.

        Raises:
            ValueError: If mask_char could itself form part of a word token.
        """
        if len(mask_char) != 1 or WORD_PATTERN.match(mask_char) or mask_char.isspace():
            raise ValueError(
                f"mask_char must be a single non-word character, got {mask_char!r}"
            )
        self._mask_char = mask_char
        self._words = frozenset(w.strip().lower() for w in words if w.strip())

    @classmethod
    def from_settings(cls, settings: ModerationSettings) -> "Redactor":
        """Build a redactor from the blocklist file plus extra configured words."""
        words = list(load_word_list(settings.blocklist_path))
        words.extend(settings.extra_words_list)
        return cls(words, mask_char=settings.mask_char)

    @property
    def words(self) -> frozenset[str]:
        """The normalized blocklist."""
        return self._words

    def is_blocked(self, word: str) -> bool:
        """Check a single word token against the blocklist."""
        return word.lower() in self._words

    def contains_blocked(self, text: str) -> bool:
        """Check whether any word token in text is blocklisted."""
        return any(self.is_blocked(m.group()) for m in WORD_PATTERN.finditer(text))

    def redact(self, text: str) -> RedactionResult:
        """Mask every blocklisted token in text.

        Args:
            text: Original message text.

        Returns:
            RedactionResult; ``violated`` is True iff at least one token
            was masked.
        """
        violated = False

        def _mask(match: re.Match[str]) -> str:
            nonlocal violated
            token = match.group()
            if token.lower() in self._words:
                violated = True
                return self._mask_char * len(token)
            return token

        redacted = WORD_PATTERN.sub(_mask, text)
        if not violated:
            return RedactionResult(text=text, violated=False)

        return RedactionResult(
            text=redacted,
            violated=True,
            offending_token=self._first_offending_token(text),
        )

    def _first_offending_token(self, text: str) -> str:
        # Whitespace split keeps adjacent punctuation in the token ("idiot!").
        for token in text.split():
            if self.contains_blocked(token):
                return token
        # Unreachable for violating text, since \w+ never spans whitespace.
        raise ValueError("No offending token in violating text")
