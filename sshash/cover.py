"""Cover of a weight graph by walks, used to permute weighted sequences.

Every sequence is a node carrying the weights of its first and last k-mer.
Nodes are chained so that consecutive sequences share an end weight, which
reduces the number of weight runs once the sequences are written in walk order.
"""

from __future__ import annotations

import time
from collections import defaultdict, deque
from collections.abc import Iterable
from dataclasses import replace
from itertools import groupby
from typing import TextIO

from .even_frequency_weights import EvenFrequencyWeights
from .node import INVALID_UINT32, Node


class Cover:
    """Computes a set of walks covering all nodes and writes them as a permutation."""

    def __init__(self, nodes: Iterable[Node], num_runs_weights: int) -> None:
        self._nodes: list[Node] = [replace(n) for n in nodes]
        self._num_sequences = len(self._nodes)
        if num_runs_weights < self._num_sequences:
            raise ValueError(
                f"num_runs_weights ({num_runs_weights}) must be at least the number "
                f"of sequences ({self._num_sequences})"
            )
        self._initial_num_runs = num_runs_weights
        self.num_runs_weights = num_runs_weights
        self.estimated_num_walks = 0
        self._walks: list[deque[Node]] = []
        self._chains: list[deque[Node]] = []
        # weight -> offsets of unvisited nodes where it is front or back (ordered set)
        self._incidence: defaultdict[int, dict[int, None]] = defaultdict(dict)
        self._unvisited: dict[int, None] = {}
        self._computed = False

    def compute(self) -> None:
        """Compute the walks covering every node."""
        if self._computed:
            raise RuntimeError("the cover has already been computed")
        print(f"initial number of runs = {self._initial_num_runs}")
        print(f"num_nodes = {len(self._nodes)}")
        start = time.perf_counter_ns()
        self._pre_process()
        self._merge_even()
        self._greedy_cover()
        elapsed_us = (time.perf_counter_ns() - start) // 1000
        per_node = (elapsed_us * 1000) / self._num_sequences if self._num_sequences else 0.0
        print(f"cover computed in: {elapsed_us / 1_000_000} [sec] ({per_node} [ns/node])")
        self._computed = True

    def write(self, out: TextIO) -> int:
        """Write one line "id sign" per sequence in walk order; return the count written."""
        if not self._computed:
            raise RuntimeError("compute() must be called before writing the cover")
        nodes = [replace(n) for n in self._nodes]
        chains = [deque(replace(n) for n in chain) for chain in self._chains]
        written = 0
        for walk in self._walks:
            prev_back = walk[0].front
            for top in walk:
                stack = [(top, True)]
                while stack:
                    u, parent_sign = stack.pop()
                    if not u.is_leaf():
                        new_sign = parent_sign == u.sign
                        first, second = (u.left, u.right) if new_sign else (u.right, u.left)
                        stack.append((nodes[second], new_sign))
                        stack.append((nodes[first], new_sign))
                    elif u.chain_id != INVALID_UINT32:
                        chain = chains[u.chain_id]
                        if parent_sign == u.sign:
                            members = list(chain)
                        else:
                            members = list(reversed(chain))
                            for leaf in members:
                                leaf.change_orientation()
                        for leaf in members:
                            prev_back = self._write_leaf(leaf, out, prev_back)
                        written += len(members)
                    else:
                        if not parent_sign:
                            u.change_orientation()
                        prev_back = self._write_leaf(u, out, prev_back)
                        written += 1

        if written != self._num_sequences:
            print(
                f"Error: expected to write {self._num_sequences} but written {written}"
            )
            raise RuntimeError("wrong number of sequences written")

        self.num_runs_weights = (
            self._initial_num_runs - self._num_sequences + len(self._walks)
        )
        print(f"final number of runs = {self.num_runs_weights}")
        return written

    def save(self, filename: str) -> int:
        """Write the cover to ``filename``; return the number of sequences written."""
        with open(filename, "w", encoding="ascii") as out:
            return self.write(out)

    @staticmethod
    def _write_leaf(u: Node, out: TextIO, prev_back: int) -> int:
        if u.front != prev_back:
            print("ERROR: path is broken.")
        out.write(f"{u.id} {1 if u.sign else 0}\n")
        return u.back

    def _insert(self, u: Node, offset: int) -> None:
        self._unvisited[offset] = None
        self._incidence[u.front][offset] = None
        self._incidence[u.back][offset] = None

    def _erase(self, u: Node, offset: int) -> None:
        self._unvisited.pop(offset, None)
        self._incidence[u.front].pop(offset, None)
        self._incidence[u.back].pop(offset, None)

    @staticmethod
    def _append_to_walk(u: Node, walk: deque[Node]) -> None:
        if not walk:
            walk.append(u)
            return
        if walk[0].front == u.front or walk[-1].back == u.back:
            u.change_orientation()
        if walk[0].front == u.back:
            walk.appendleft(u)
        elif walk[-1].back == u.front:
            walk.append(u)

    @staticmethod
    def _merge(x: Node, y: Node, w: int, offset_x: int, offset_y: int) -> Node:
        """Join x and y on weight w and return their parent."""
        if x.front == w:
            x.change_orientation()
        if y.back == w:
            y.change_orientation()
        return Node(front=x.front, back=y.back, left=offset_x, right=offset_y)

    def _chain_parent(self, chain: deque[Node]) -> Node:
        parent = Node(front=chain[0].front, back=chain[-1].back, chain_id=len(self._chains))
        self._chains.append(chain)
        return parent

    def _pre_process(self) -> None:
        # (x, y) and (y, x) are the same node: normalise to x <= y
        for u in self._nodes:
            if u.front > u.back:
                u.change_orientation()
        self._nodes.sort(key=lambda u: (u.front, u.back))

        parents: list[Node] = []
        for (front, back), group in groupby(self._nodes, key=lambda u: (u.front, u.back)):
            chain: deque[Node] = deque()
            for u in group:
                self._append_to_walk(u, chain)
            if len(chain) == 1:
                parents.append(chain[0])
            elif front != back and len(chain) % 2 == 0:
                last = chain[-1]
                if len(chain) == 2:
                    parents.extend((last, chain[0]))
                else:
                    chain.pop()
                    parents.extend((last, self._chain_parent(chain)))
            else:
                parents.append(self._chain_parent(chain))

        print(f"num_chains = {len(self._chains)}")
        self._nodes = parents

        for offset, u in enumerate(self._nodes):
            self._insert(u, offset)

        # merge each node (w, w) with another node incident to w
        for offset_u, u in enumerate(list(self._nodes)):
            if u.front != u.back:
                continue
            w = u.front
            incidence_w = self._incidence[w]
            if len(incidence_w) == 1:
                continue
            self._erase(u, offset_u)
            offset_x = next(iter(incidence_w))
            x = self._nodes[offset_x]
            self._erase(x, offset_x)
            parent = self._merge(x, u, w, offset_x, offset_u)
            offset_p = len(self._nodes)
            self._nodes.append(parent)
            self._insert(parent, offset_p)

    def _merge_even(self) -> None:
        freq: dict[int, int] = defaultdict(int)
        for offset, u in enumerate(self._nodes):
            if offset in self._unvisited:
                freq[u.front] += 1
                freq[u.back] += 1
        efw = EvenFrequencyWeights(freq)

        while efw.has_next():
            w = efw.min()
            incidence_w = self._incidence[w]
            if len(incidence_w) < 2:
                continue  # a single node (w, w) in its component

            it = iter(incidence_w)
            offset_x = next(it)
            offset_y = next(it)
            x = self._nodes[offset_x]
            y = self._nodes[offset_y]
            parent = self._merge(x, y, w, offset_x, offset_y)
            self._erase(x, offset_x)
            self._erase(y, offset_y)
            offset_p = len(self._nodes)
            self._nodes.append(parent)

            if parent.front == parent.back:
                ww = parent.front
                efw.decrease_freq(ww)
                incidence_ww = self._incidence[ww]
                if incidence_ww:
                    offset_xx = next(iter(incidence_ww))
                    xx = self._nodes[offset_xx]
                    self._insert(parent, offset_p)
                    yy = parent
                    parent = self._merge(xx, yy, ww, offset_xx, offset_p)
                    self._erase(xx, offset_xx)
                    self._erase(yy, offset_p)
                    offset_p = len(self._nodes)
                    self._nodes.append(parent)

            self._insert(parent, offset_p)

        self._compute_lower_bound()

    def _compute_lower_bound(self) -> None:
        freq: dict[int, int] = defaultdict(int)
        all_equal: dict[int, bool] = {}
        for offset, u in enumerate(self._nodes):
            if offset not in self._unvisited:
                continue
            for w in (u.front, u.back):
                freq[w] += 1
                all_equal.setdefault(w, True)
            if u.front != u.back:
                all_equal[u.front] = False
                all_equal[u.back] = False

        num_endpoints = 0
        for w, f in freq.items():
            if all_equal[w]:
                num_endpoints += 2  # only nodes (w, w): w is both endpoints
            elif f % 2 == 1:
                num_endpoints += 1
        self.estimated_num_walks = num_endpoints // 2
        print(f"(estimated) num_walks = {self.estimated_num_walks}")

    def _first_incident(self, w: int) -> int | None:
        incidence = self._incidence.get(w)
        if not incidence:
            return None
        return next(iter(incidence))

    def _greedy_cover(self) -> None:
        while self._unvisited:
            offset_u = next(iter(self._unvisited))
            walk: deque[Node] = deque()
            while True:
                u = replace(self._nodes[offset_u])
                self._append_to_walk(u, walk)
                self._erase(u, offset_u)
                found = self._first_incident(walk[-1].back)
                if found is None:
                    found = self._first_incident(walk[0].front)
                if found is None:
                    break
                offset_u = found
            self._walks.append(walk)
        print(f"num_walks = {len(self._walks)}")