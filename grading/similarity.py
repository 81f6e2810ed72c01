"""
Positional character-match score.

Both strings are lower-cased and trimmed (punctuation kept); a position
counts as correct when both strings hold the same character there. An
insertion or deletion shifts everything after it out of alignment, which
historical scores depend on, so this is not an edit distance.
"""


def character_match_score(reference: str, candidate: str) -> float:
    """
    Score a transcription against the expected answer.

    Returns:
        100 * matching positions / length of the longer string, in [0, 100];
        100 when both strings are empty after normalisation
    """
    a = (reference or "").lower().strip()
    b = (candidate or "").lower().strip()

    longer = max(len(a), len(b))
    if longer == 0:
        return 100.0

    correct = sum(1 for x, y in zip(a, b) if x == y)
    return correct / longer * 100
