"""Task list loading for treesync.

A task list is a JSON array of ``{"from": ..., "to": ...}`` objects stored in
``syncConfig.json`` in the working directory. ``"source"`` and
``"destination"`` are accepted as key aliases. When the file is missing, a
template is written so the user has something to edit.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Mapping, Optional

from treesync.exceptions import TaskListEmptyError, TaskListMalformedError
from treesync.models import SyncTask

logger = logging.getLogger(__name__)


class TaskListLoader:
    """Reads and validates the JSON task list.

    The working directory and environment are injected so that loading is
    independent of process state in tests.

    Attributes:
        cwd: Directory relative task paths (and the default file) resolve against.
        environ: Mapping used for ``%NAME%`` expansion in task paths.
        task_file: The task list file used by the last load.
        template_written: Whether the last load created a template file.
    """

    DEFAULT_FILE_NAME = "syncConfig.json"
    TEMPLATE = [{"from": "fromPath", "to": "toPath"}]

    SOURCE_KEYS = ("from", "source")
    DESTINATION_KEYS = ("to", "destination")

    def __init__(
        self,
        cwd: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.cwd = cwd if cwd is not None else os.getcwd()
        self.environ = environ
        self.task_file = self.default_path()
        self.template_written = False

    def default_path(self) -> Path:
        return Path(self.cwd) / self.DEFAULT_FILE_NAME

    def load(self, path: Optional[Path] = None) -> List[SyncTask]:
        """Load the task list at ``path`` (default: ``syncConfig.json`` in cwd).

        Args:
            path: Task list file. Relative paths resolve against ``cwd``.

        Returns:
            The tasks, in file order, with canonical paths.

        Raises:
            TaskListMalformedError: If the file is not JSON, not a list, or an
                entry lacks string source/destination paths.
            TaskListEmptyError: If no tasks remain after loading.
        """
        task_file = self._resolve(path)
        self.task_file = task_file
        self.template_written = False

        if not task_file.exists():
            self.write_template(task_file)

        try:
            raw = json.loads(task_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise TaskListMalformedError(
                f"Task list is not valid JSON: {task_file} ({e})", str(task_file)
            )
        except OSError as e:
            raise TaskListMalformedError(
                f"Cannot read task list: {task_file} ({e})", str(task_file)
            )

        tasks = self.parse(raw, task_file)
        logger.debug(f"Loaded {len(tasks)} task(s) from {task_file}")
        return tasks

    def parse(self, raw: Any, task_file: Path) -> List[SyncTask]:
        """Validate decoded JSON and turn its entries into tasks.

        Entries identical to the template placeholder are skipped.
        """
        if not isinstance(raw, list):
            raise TaskListMalformedError(
                f"Wrong structure of {task_file.name}: expected a list of tasks", str(task_file)
            )

        tasks: List[SyncTask] = []
        for index, entry in enumerate(raw):
            if not isinstance(entry, dict):
                raise TaskListMalformedError(
                    f"Task #{index + 1} in {task_file.name} is not an object", str(task_file)
                )
            if entry in self.TEMPLATE:
                logger.debug(f"Skipping template placeholder task #{index + 1}")
                continue

            source = self._pick(entry, self.SOURCE_KEYS)
            destination = self._pick(entry, self.DESTINATION_KEYS)
            if source is None or destination is None:
                raise TaskListMalformedError(
                    f"Task #{index + 1} in {task_file.name} needs string "
                    f"'from' and 'to' paths",
                    str(task_file),
                )

            tasks.append(
                SyncTask.from_paths(source, destination, cwd=self.cwd, environ=self.environ)
            )

        if not tasks:
            raise TaskListEmptyError(f"{task_file.name} is empty!", str(task_file))

        return tasks

    def write_template(self, task_file: Path) -> None:
        """Write the placeholder task list to ``task_file``."""
        task_file.write_text(json.dumps(self.TEMPLATE, indent=2) + "\n", encoding="utf-8")
        self.template_written = True
        logger.info(f"Task list not found, wrote template: {task_file}")

    def _resolve(self, path: Optional[Path]) -> Path:
        if path is None:
            return self.default_path()
        path = Path(path)
        return path if path.is_absolute() else Path(self.cwd) / path

    @staticmethod
    def _pick(entry: Mapping[str, Any], keys: tuple) -> Optional[str]:
        for key in keys:
            value = entry.get(key)
            if isinstance(value, str) and value:
                return value
        return None
