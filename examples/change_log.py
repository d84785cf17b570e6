"""
Change log for a nested application state.

Records every mutation made through a tracked state object as a flat,
dotted-path log entry, the way a UI layer would collect dirty fields.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List

from proxystate import MutationType, create_tracking_proxy

logger = logging.getLogger(__name__)


@dataclass
class WindowConfig:
    width: int = 800
    height: int = 600


@dataclass
class AppState:
    title: str = "untitled"
    window: WindowConfig = field(default_factory=WindowConfig)
    recent_files: List[str] = field(default_factory=list)


@dataclass(eq=False)
class ChangeLog:
    entries: List[str] = field(default_factory=list)

    def __call__(self, kind: MutationType, path: List[str], payload: Any) -> None:
        dotted = ".".join(path) or "<root>"
        if kind == MutationType.ARRAY_MUTATION:
            method, *args = payload
            self.entries.append(f"{dotted}.{method}({', '.join(map(repr, args))})")
        elif kind == MutationType.DELETE:
            self.entries.append(f"del {dotted}")
        else:
            self.entries.append(f"{dotted} = {payload!r}")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    log = ChangeLog()

    with create_tracking_proxy(AppState()) as tracking:
        tracking.add_listener(log)
        state = tracking.proxy

        state.title = "report.txt"
        state.window.width = 1024
        state.recent_files.append("report.txt")
        state.recent_files.insert(0, "notes.md")

    for entry in log.entries:
        logger.info(entry)


if __name__ == "__main__":
    main()
