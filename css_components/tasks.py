"""Named build tasks executed as an explicit dependency graph.

Each :class:`Task` declares the tasks it depends on (``deps``, always pulled
into a run) and the tasks it must follow when both are scheduled
(``after``). :meth:`TaskGraph.run` collects the transitive closure of the
requested targets, orders it topologically, and runs every task once.

Examples
--------
>>> graph = TaskGraph()
>>> calls = []
>>> _ = graph.add("clean", lambda: calls.append("clean"))
>>> _ = graph.add("compile", lambda: calls.append("compile"), after=["clean"])
>>> _ = graph.add("build", lambda: None, deps=["clean", "compile"])
>>> graph.run("build")
['clean', 'compile', 'build']
>>> calls
['clean', 'compile']
"""

from __future__ import annotations

import dataclasses as dc
import graphlib
import logging
import typing as typ

logger = logging.getLogger(__name__)


class TaskError(RuntimeError):
    """Base class for task graph failures."""


class UnknownTaskError(TaskError):
    """Raised when a task name is not registered in the graph."""


class TaskCycleError(TaskError):
    """Raised when task dependencies form a cycle."""


@dc.dataclass(frozen=True, slots=True)
class Task:
    """A named unit of build work.

    Attributes
    ----------
    name : str
        Identifier used on the command line.
    action : Callable[[], object]
        Callable executed when the task runs.
    deps : tuple[str, ...]
        Tasks that always run before this one.
    after : tuple[str, ...]
        Tasks this one must follow only when they are part of the same run.
    """

    name: str
    action: typ.Callable[[], object]
    deps: tuple[str, ...] = ()
    after: tuple[str, ...] = ()


class TaskGraph:
    """Registry of tasks with topological execution."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> typ.Iterator[Task]:
        return iter(self._tasks.values())

    def add(
        self,
        name: str,
        action: typ.Callable[[], object],
        *,
        deps: typ.Iterable[str] = (),
        after: typ.Iterable[str] = (),
    ) -> Task:
        """Register a task, replacing any previous task with the same name."""
        task = Task(
            name=name,
            action=action,
            deps=tuple(deps),
            after=tuple(after),
        )
        self._tasks[name] = task
        return task

    def get(self, name: str) -> Task:
        """Return the task registered as ``name``."""
        try:
            return self._tasks[name]
        except KeyError:
            msg = f"Unknown task '{name}'."
            raise UnknownTaskError(msg) from None

    def plan(self, *targets: str) -> list[str]:
        """Return the execution order for ``targets`` without running anything.

        Raises
        ------
        UnknownTaskError
            If a target or one of its dependencies is not registered.
        TaskCycleError
            If the scheduled tasks depend on each other cyclically.
        """
        scheduled = self._closure(targets)
        sorter: graphlib.TopologicalSorter[str] = graphlib.TopologicalSorter()
        for name in self._tasks:
            if name not in scheduled:
                continue
            task = self._tasks[name]
            predecessors = list(task.deps)
            predecessors.extend(dep for dep in task.after if dep in scheduled)
            sorter.add(name, *predecessors)
        try:
            sorter.prepare()
        except graphlib.CycleError as exc:
            cycle = " -> ".join(exc.args[1])
            msg = f"Task dependencies form a cycle: {cycle}"
            raise TaskCycleError(msg) from exc

        declared = list(self._tasks)
        order: list[str] = []
        while sorter.is_active():
            for name in sorted(sorter.get_ready(), key=declared.index):
                order.append(name)
                sorter.done(name)
        return order

    def run(self, *targets: str) -> list[str]:
        """Run ``targets`` and their dependencies, returning the executed names."""
        order = self.plan(*targets)
        for name in order:
            logger.info("Starting '%s'", name)
            self._tasks[name].action()
            logger.info("Finished '%s'", name)
        return order

    def _closure(self, targets: typ.Iterable[str]) -> set[str]:
        scheduled: set[str] = set()
        pending = list(targets)
        while pending:
            name = pending.pop()
            if name in scheduled:
                continue
            task = self.get(name)
            scheduled.add(name)
            pending.extend(task.deps)
        return scheduled


__all__ = ["Task", "TaskCycleError", "TaskError", "TaskGraph", "UnknownTaskError"]
