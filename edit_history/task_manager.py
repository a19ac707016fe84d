import importlib.util
import os

TASK_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "tasks")


class TaskManager:
    def __init__(self, task_dir=TASK_DIR):
        self.task_dir = task_dir

    def get_available_tasks(self):
        return sorted(f.replace(".py", "") for f in os.listdir(self.task_dir)
                      if f.endswith(".py") and not f.startswith("_"))

    def load_task(self, task_name):
        path = os.path.join(self.task_dir, f"{task_name}.py")
        if not os.path.isfile(path):
            raise KeyError(f"Unknown task {task_name!r}")
        spec = importlib.util.spec_from_file_location(f"edit_history_task_{task_name}", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def run_task(self, task_name, **kwargs):
        """Load and run a task; tasks return (ok, message)."""
        return self.load_task(task_name).run(**kwargs)
