from typing import List, Sequence, TypeVar

T = TypeVar("T")

PER_VIEW = 4
INTERVAL_MS = 3000


def max_index(total: int, per_view: int = PER_VIEW) -> int:
    return max(0, total - per_view)

def carousel_windows(items: Sequence[T], per_view: int = PER_VIEW) -> List[List[T]]:
    """Toutes les positions du carrousel (fenêtres glissantes de per_view éléments)"""
    if not items:
        return []
    return [list(items[i:i + per_view]) for i in range(max_index(len(items), per_view) + 1)]
