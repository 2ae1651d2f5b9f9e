"""
External route optimizer capability.
VROOM is run as a batch process with file-based JSON input/output.
"""

import json
import logging
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from config import get_settings
from config.settings import OptimizerSettings
from spe.errors import OptimizerUnavailable
from spe.simulation_layer.models import OptimizerProblem

logger = logging.getLogger(__name__)


class RouteOptimizer(ABC):
    """Abstract optimizer interface."""

    @abstractmethod
    def optimize(self, problem: OptimizerProblem, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Return the optimizer's assignment JSON or raise OptimizerUnavailable."""
        ...


class VroomOptimizer(RouteOptimizer):
    """Runs `<bin> -i <input.json> -o <output.json>` with a hard timeout."""

    def __init__(self, binary: str, timeout: float = 30.0):
        self.binary = binary
        self.timeout = timeout

    def optimize(self, problem: OptimizerProblem, timeout: Optional[float] = None) -> Dict[str, Any]:
        timeout = timeout if timeout is not None else self.timeout
        with tempfile.TemporaryDirectory(prefix="vroom_") as work_dir:
            in_path = Path(work_dir) / "input.json"
            out_path = Path(work_dir) / "output.json"
            in_path.write_text(json.dumps(problem.to_dict()), encoding="utf-8")

            try:
                proc = subprocess.run(
                    [self.binary, "-i", str(in_path), "-o", str(out_path)],
                    capture_output=True,
                    text=True,
                    timeout=timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise OptimizerUnavailable(f"vroom timed out after {timeout:.1f}s") from exc
            except OSError as exc:
                raise OptimizerUnavailable(f"vroom could not be started: {exc}") from exc

            if proc.returncode != 0:
                raise OptimizerUnavailable(
                    f"vroom failed with exit code {proc.returncode}: {proc.stderr.strip()}"
                )
            try:
                return json.loads(out_path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                raise OptimizerUnavailable(f"vroom output unreadable: {exc}") from exc


def build_optimizer(settings: Optional[OptimizerSettings] = None) -> Optional[RouteOptimizer]:
    """VroomOptimizer when VROOM_BIN is set, else None."""
    settings = settings or get_settings().optimizer
    if not settings.bin:
        return None
    if shutil.which(settings.bin) is None and not Path(settings.bin).exists():
        logger.warning("VROOM_BIN %r not found; optimizer disabled", settings.bin)
        return None
    return VroomOptimizer(settings.bin, timeout=settings.timeout_s)
