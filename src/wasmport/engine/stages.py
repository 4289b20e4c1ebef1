# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Union and topological ordering of stages contributed by matched rules."""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter

from ..catalog.model_stage import BuildStage, StageKind
from ..errors import StageCycleError

LOGGER = logging.getLogger(__name__)

StageOrder = tuple[int, int, int]


@dataclass(slots=True)
class _StageSlot:
    """Mutable accumulation state for one stage name."""

    stage: BuildStage
    rule: str
    priority: int
    order: StageOrder
    depends_on: set[str] = field(default_factory=set)


class StageGraph:
    """Collect stages by name and order them into a dependency-respecting sequence.

    Stages sharing a name are merged: their ``dependsOn`` sets are unioned,
    while the kind and command follow the same precedence as flags (a
    contribution replaces the holder when its priority is greater or equal).
    """

    def __init__(self) -> None:
        self._slots: dict[str, _StageSlot] = {}

    def add(self, stage: BuildStage, *, rule: str, priority: int, order: StageOrder) -> None:
        """Contribute ``stage`` on behalf of ``rule``.

        Args:
            stage: Expanded stage.
            rule: Identifier of the contributing rule.
            priority: Priority of the contributing rule.
            order: Declaration position ``(rule index, template index, expansion index)``.
        """

        slot = self._slots.get(stage.name)
        if slot is None:
            self._slots[stage.name] = _StageSlot(
                stage=stage,
                rule=rule,
                priority=priority,
                order=order,
                depends_on=set(stage.depends_on),
            )
            return
        slot.depends_on.update(stage.depends_on)
        slot.order = min(slot.order, order)
        if priority >= slot.priority:
            LOGGER.debug("stage %s: %s (p%d) replaces %s", stage.name, rule, priority, slot.rule)
            slot.stage = stage
            slot.rule = rule
            slot.priority = priority

    def has_build_stage(self) -> bool:
        """Return ``True`` when a tool-level compile stage or any link stage is present."""

        return any(
            slot.stage.kind is StageKind.LINK
            or (slot.stage.kind is StageKind.COMPILE and slot.stage.dependency is None)
            for slot in self._slots.values()
        )

    def origin(self, name: str) -> str:
        """Return the identifier of the rule whose definition of ``name`` won."""

        return self._slots[name].rule

    def ordered(self) -> tuple[BuildStage, ...]:
        """Return stages in topological order with explicit and implicit edges applied.

        Ties between independent stages are broken by declaration order.

        Raises:
            StageCycleError: If the edges form a cycle.
        """

        edges = self._edges()
        sorter: TopologicalSorter[str] = TopologicalSorter()
        for name, predecessors in edges.items():
            sorter.add(name, *sorted(predecessors, key=self._sort_key))
        try:
            sorter.prepare()
        except CycleError as exc:
            cycle = list(exc.args[1]) if len(exc.args) > 1 else sorted(self._slots)
            raise StageCycleError(cycle) from exc

        ready: list[tuple[StageOrder, str]] = []
        ordered: list[BuildStage] = []
        while sorter.is_active():
            for name in sorter.get_ready():
                heapq.heappush(ready, (self._slots[name].order, name))
            _, name = heapq.heappop(ready)
            slot = self._slots[name]
            ordered.append(
                BuildStage(
                    name=name,
                    kind=slot.stage.kind,
                    command_template=slot.stage.command_template,
                    depends_on=frozenset(edges[name]),
                    dependency=slot.stage.dependency,
                ),
            )
            sorter.done(name)
        return tuple(ordered)

    def _sort_key(self, name: str) -> StageOrder:
        return self._slots[name].order

    def _edges(self) -> dict[str, set[str]]:
        """Return predecessors per stage after dropping dangling and adding implicit edges.

        Implicit edges: every non-fetch stage follows all fetch stages, every
        link stage follows all compile stages, and tool-level stages follow
        the configure and compile stages of dependencies.
        """

        fetch = {name for name, slot in self._slots.items() if slot.stage.kind is StageKind.FETCH_DEPENDENCY}
        compile_ = {name for name, slot in self._slots.items() if slot.stage.kind is StageKind.COMPILE}
        bound = {
            name
            for name, slot in self._slots.items()
            if slot.stage.dependency is not None
            and slot.stage.kind in (StageKind.CONFIGURE, StageKind.COMPILE)
        }
        edges: dict[str, set[str]] = {}
        for name, slot in self._slots.items():
            predecessors: set[str] = set()
            for target in slot.depends_on:
                if target in self._slots:
                    predecessors.add(target)
                else:
                    LOGGER.debug("stage %s: dropped edge to absent stage %s", name, target)
            kind = slot.stage.kind
            if kind is not StageKind.FETCH_DEPENDENCY:
                predecessors.update(fetch)
            if kind is StageKind.LINK:
                predecessors.update(compile_)
            if kind is not StageKind.FETCH_DEPENDENCY and slot.stage.dependency is None:
                predecessors.update(bound)
            edges[name] = predecessors
        return edges


__all__ = ["StageGraph", "StageOrder"]
