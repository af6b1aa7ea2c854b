from __future__ import annotations

from _infra import banner, run

from lazycombinators import SyncFunction, SyncSequence, depth_first


def no_repeats(child) -> bool:
    return child.last not in child.parent.to_list() if child.parent else True


async def main() -> None:
    banner("02_search: permutations by pruning a product")

    digits = [1, 2, 3]
    step = SyncSequence.product(digits, digits, digits)

    # prune while expanding: rejected prefixes never grow
    pruned = SyncFunction(step).restrict_each(no_repeats)
    for chain in depth_first(pruned):
        print(chain.to_list())

    # the same answer, filtering only complete chains
    late = depth_first(step).restrict(lambda chain: len(set(chain.to_list())) == 3)
    print(len(late.to_list()), "permutations")


if __name__ == "__main__":
    run(main)
