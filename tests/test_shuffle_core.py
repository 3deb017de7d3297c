from __future__ import annotations

from dataclasses import dataclass

from sequence_gate.shuffle import SeededRng, shuffled


@dataclass
class ScriptedRng:
    picks: list[int]

    def randint(self, a: int, b: int) -> int:
        value = self.picks.pop(0)
        assert a <= value <= b
        return value


def test_shuffle_is_a_bijection_of_the_identifiers() -> None:
    for seed in range(200):
        out = shuffled(range(9), SeededRng(seed))
        assert len(out) == 9
        assert sorted(out) == list(range(9))


def test_shuffle_leaves_input_unmodified() -> None:
    items = [0, 1, 2, 3, 4, 5, 6, 7, 8]
    shuffled(items, SeededRng(3))
    assert items == [0, 1, 2, 3, 4, 5, 6, 7, 8]


def test_shuffle_is_deterministic_for_same_seed() -> None:
    assert shuffled(range(9), SeededRng(12345)) == shuffled(range(9), SeededRng(12345))


def test_shuffle_handles_empty_and_single() -> None:
    assert shuffled([], SeededRng(1)) == []
    assert shuffled(["a"], SeededRng(1)) == ["a"]


def test_shuffle_walks_from_last_index_down() -> None:
    # i=2 picks 0, i=1 picks 1: [a,b,c] -> [c,b,a] -> [c,b,a]
    rng = ScriptedRng(picks=[0, 1])
    assert shuffled(["a", "b", "c"], rng) == ["c", "b", "a"]
    assert rng.picks == []


def test_shuffle_reaches_every_permutation_of_three() -> None:
    seen = {tuple(shuffled("abc", SeededRng(seed))) for seed in range(300)}
    assert len(seen) == 6


def test_shuffle_of_three_is_close_to_uniform() -> None:
    # 60000 draws, 10000 expected per ordering (sigma ~91). Swapping with any
    # index instead of an index <= i gives 4/27 or 5/27: ~8889 or ~11111.
    rng = SeededRng(2718)
    counts: dict[tuple[str, ...], int] = {}
    for _ in range(60000):
        key = tuple(shuffled("abc", rng))
        counts[key] = counts.get(key, 0) + 1
    assert len(counts) == 6
    for count in counts.values():
        assert 9500 <= count <= 10500
