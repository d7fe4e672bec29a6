def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance (insert/delete/substitute all cost 1)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1,
                               current[j - 1] + 1,
                               previous[j - 1] + cost))
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """1.0 for identical strings, 0.0 for completely different ones."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return (max_len - levenshtein_distance(a, b)) / max_len


def normalize_name(name) -> str:
    return (name or '').strip().lower()
