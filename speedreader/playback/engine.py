"""Word-level RSVP primitives: tokenization, ORP and display timing."""

from pydantic import BaseModel, ConfigDict

SENTENCE_PUNCTUATION = (".", "!", "?", ";", ":")
LONG_WORD_LENGTH = 10
LONG_WORD_FACTOR = 1.2


class RSVPWord(BaseModel):
    """A token split around its Optimal Recognition Point."""

    model_config = ConfigDict(frozen=True)

    word: str
    orp_index: int
    before_orp: str
    orp_char: str
    after_orp: str


def tokenize(text: str) -> list[str]:
    """Split text into whitespace-delimited tokens, punctuation attached.

    Depends only on ``text``: word counts and stored reading positions
    both index into this sequence.
    """
    return text.split()


def orp_index(word: str) -> int:
    """Index of the fixation character, biased left of center."""
    length = len(word)
    if length <= 3:
        return 0
    if length <= 5:
        return 1
    if length <= 9:
        return 2
    if length <= 13:
        return 3
    return int(length * 0.25)


def process_word(word: str) -> RSVPWord:
    index = orp_index(word)
    return RSVPWord(
        word=word,
        orp_index=index,
        before_orp=word[:index],
        orp_char=word[index : index + 1],
        after_orp=word[index + 1 :],
    )


def calculate_delay(word: str, wpm: float, punctuation_pause: float) -> float:
    """Milliseconds to display ``word`` at ``wpm`` words per minute.

    Sentence punctuation adds the full pause, a trailing comma adds half
    of it, and otherwise long words get 20% more time. Only one adjustment
    applies. ``wpm`` must already be a positive, clamped rate.
    """
    base_delay = 60000 / wpm

    if word.endswith(SENTENCE_PUNCTUATION):
        return base_delay + punctuation_pause
    if word.endswith(","):
        return base_delay + punctuation_pause / 2
    if len(word) > LONG_WORD_LENGTH:
        return base_delay * LONG_WORD_FACTOR
    return base_delay
