"""
Numba-compiled tie-credit kernels.

Both kernels take the hands of one board sorted by ascending strength:

    strengths[i]            evaluator value (equal values form a tie group)
    cards_a[i], cards_b[i]  the two hole cards (a < b)

and credit each hand against opponents that share no card with it, in half
units: 2 per strictly worse opponent, 1 per tied opponent.

Each tie group is processed in two phases:
1. count, per card, how many group members hold it
2. credit every member by subtracting card-blocked hands from the totals
then the group is folded into the running "worse" tallies.

Only the hero holds both of its own cards, so the blocked counts of a and b
never overlap except on the hero itself.
"""

import numpy as np
from numba import jit


@jit(nopython=True, cache=True)
def tie_credit(strengths, cards_a, cards_b, num_cards):
    """
    Strength rank of every hand on a board.

    Args:
        strengths: Evaluator values, sorted ascending
        cards_a: First hole card per hand
        cards_b: Second hole card per hand
        num_cards: Deck size

    Returns:
        int64 array: 2 * (worse opponents) + (tied opponents)
    """
    n = len(strengths)
    credit = np.zeros(n, dtype=np.int64)
    worse_by_card = np.zeros(num_cards, dtype=np.int64)
    group_by_card = np.zeros(num_cards, dtype=np.int64)
    worse_total = 0

    start = 0
    while start < n:
        end = start + 1
        while end < n and strengths[end] == strengths[start]:
            end += 1
        group_size = end - start

        for i in range(start, end):
            group_by_card[cards_a[i]] += 1
            group_by_card[cards_b[i]] += 1

        for i in range(start, end):
            a = cards_a[i]
            b = cards_b[i]
            worse = worse_total - worse_by_card[a] - worse_by_card[b]
            tied = group_size + 1 - group_by_card[a] - group_by_card[b]
            credit[i] = 2 * worse + tied

        for i in range(start, end):
            a = cards_a[i]
            b = cards_b[i]
            worse_by_card[a] += 1
            worse_by_card[b] += 1
            group_by_card[a] = 0
            group_by_card[b] = 0
        worse_total += group_size
        start = end

    return credit


@jit(nopython=True, cache=True)
def cluster_tie_credit(strengths, cards_a, cards_b, clusters, cluster_sizes, num_cards):
    """
    Per-cluster tie credit and opponent population of every hand on a board.

    Args:
        strengths: Evaluator values, sorted ascending
        cards_a: First hole card per hand
        cards_b: Second hole card per hand
        clusters: Opponent cluster of each hand
        cluster_sizes: Hole pairs per cluster over the full deck
        num_cards: Deck size

    Returns:
        (credit, population), both int64 arrays of shape (n, K):
        credit is 2 * worse + tied against cluster k, population is the
        number of cluster-k opponents that avoid the board and the hero.
    """
    n = len(strengths)
    k_count = len(cluster_sizes)
    credit = np.zeros((n, k_count), dtype=np.int64)
    population = np.zeros((n, k_count), dtype=np.int64)

    worse_by_card = np.zeros((k_count, num_cards), dtype=np.int64)
    group_by_card = np.zeros((k_count, num_cards), dtype=np.int64)
    worse_total = np.zeros(k_count, dtype=np.int64)
    group_total = np.zeros(k_count, dtype=np.int64)

    start = 0
    while start < n:
        end = start + 1
        while end < n and strengths[end] == strengths[start]:
            end += 1

        for i in range(start, end):
            k = clusters[i]
            group_by_card[k, cards_a[i]] += 1
            group_by_card[k, cards_b[i]] += 1
            group_total[k] += 1

        for i in range(start, end):
            a = cards_a[i]
            b = cards_b[i]
            for k in range(k_count):
                own = 1 if clusters[i] == k else 0
                worse = worse_total[k] - worse_by_card[k, a] - worse_by_card[k, b]
                tied = group_total[k] + own - group_by_card[k, a] - group_by_card[k, b]
                credit[i, k] = 2 * worse + tied

        for i in range(start, end):
            k = clusters[i]
            a = cards_a[i]
            b = cards_b[i]
            worse_by_card[k, a] += 1
            worse_by_card[k, b] += 1
            group_by_card[k, a] = 0
            group_by_card[k, b] = 0
            worse_total[k] += 1
            group_total[k] = 0
        start = end

    # After the last group every board-compatible hand sits in the worse tallies
    for i in range(n):
        a = cards_a[i]
        b = cards_b[i]
        for k in range(k_count):
            own = 1 if clusters[i] == k else 0
            board_blocked = cluster_sizes[k] - worse_total[k]
            hero_blocked = worse_by_card[k, a] + worse_by_card[k, b] - own
            population[i, k] = cluster_sizes[k] - board_blocked - hero_blocked

    return credit, population
