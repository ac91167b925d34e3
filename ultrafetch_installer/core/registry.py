# ultrafetch_installer/core/registry.py

from __future__ import annotations

from collections.abc import Callable

from ultrafetch_installer.core.task import TaskContext, TaskResult

TaskFunc = Callable[[TaskContext], TaskResult]
_TASK_REGISTRY: dict[str, TaskFunc] = {}


def task(name: str) -> Callable[[TaskFunc], TaskFunc]:
    """
    Decorator to register a pipeline step under a display name.
    The run order is set by the caller, not by registration order.
    """

    def _decorator(fn: TaskFunc) -> TaskFunc:
        if name in _TASK_REGISTRY:
            raise RuntimeError(f"Duplicate task name: {name}")

        fn._task_name = name  # type: ignore[attr-defined]
        _TASK_REGISTRY[name] = fn
        return fn

    return _decorator


def get_task_registry() -> dict[str, TaskFunc]:
    return dict(_TASK_REGISTRY)
