import os
import datetime
import logging
from typing import Optional, Dict, Any

from .core import build_call_graph, make_registry, UnregisteredStageError
from .verify import check_call_graphs, VerificationResult
from .utils import logger as custom_logger, set_log_level, save_dot
from .utils.logger import LOG_FORMAT
from .utils.tree_io import (
    load_tree,
    save_tree,
    load_registry,
    load_call_graph,
    save_call_graph,
)


class CallGraphCheck:
    """
    A facade class to configure and run one call graph check:
    walk a lowered statement tree, then compare the recovered call graph
    against the expected one.
    """

    def __init__(
        self,
        tree=None,
        tree_path: Optional[str] = None,
        stages=None,
        stages_path: Optional[str] = None,
        expected: Optional[Dict[str, Any]] = None,
        expected_path: Optional[str] = None,
        name: Optional[str] = None,
        debug: bool = False,
        log_file: Optional[str] = None,
        log_level: Optional[int] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the check.

        Args:
            tree (IRNode, optional): Lowered statement tree (takes priority over tree_path).
            tree_path (str, optional): Path to a JSON statement tree.
            stages (optional): Stage registry, or anything make_registry() accepts.
            stages_path (str, optional): Path to a JSON registry {name: update_count}.
            expected (dict, optional): Expected call graph (caller -> callees).
            expected_path (str, optional): Path to a JSON expected call graph.
            name (str, optional): Label used in log messages and dump directory names.
            debug (bool): Dump the tree and both call graphs into a run directory.
            log_file (str): Path to log file.
            log_level (int): Log level for the package logger.
            config (dict): Optional dictionary containing configuration overrides.
                           Keys match constructor args.

        Note:
            In-memory inputs take priority over their *_path counterparts.
        """
        self.tree = tree
        self.tree_path = tree_path
        self.stages = stages
        self.stages_path = stages_path
        self.expected = expected
        self.expected_path = expected_path
        self.name = name or "check"
        self.debug = debug
        self.log_file = log_file
        self.log_level = log_level

        if config:
            self._apply_config(config)

        self.debug_dir = None
        self.call_graph = None
        self._file_handler = None

    def _apply_config(self, config):
        """Merges configuration dict into instance attributes."""
        if "tree_path" in config and not self.tree_path:
            self.tree_path = config["tree_path"]
        if "stages_path" in config and not self.stages_path:
            self.stages_path = config["stages_path"]
        if "expected_path" in config and not self.expected_path:
            self.expected_path = config["expected_path"]
        if "tree" in config and self.tree is None:
            self.tree = config["tree"]
        if "stages" in config and self.stages is None:
            self.stages = config["stages"]
        if "expected" in config and self.expected is None:
            self.expected = config["expected"]
        if "name" in config:
            self.name = config["name"]
        if "debug" in config:
            self.debug = config["debug"] or self.debug
        if "log_file" in config:
            self.log_file = config["log_file"]
        if "log_level" in config:
            level = config["log_level"]
            self.log_level = logging.getLevelName(level) if isinstance(level, str) else level

    def _setup_logging_and_debug(self):
        """Configures logging and creates debug directory."""
        if self.log_level is not None:
            set_log_level(self.log_level)

        if self.debug:
            timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
            self.debug_dir = f"{self.name}_{timestamp}"
            os.makedirs(self.debug_dir, exist_ok=True)
            # Redirect log to debug dir if not explicit
            if not self.log_file:
                self.log_file = os.path.join(self.debug_dir, "check.log")

        if self.log_file:
            self._file_handler = logging.FileHandler(self.log_file)
            self._file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            custom_logger.addHandler(self._file_handler)
            custom_logger.info(f"Logging to file: {self.log_file}")

    def _teardown_logging(self):
        if self._file_handler is not None:
            custom_logger.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None

    def _resolve_inputs(self):
        """Loads whatever was given as a path instead of an object."""
        if self.tree is None:
            if not self.tree_path:
                raise ValueError("Either tree or tree_path must be provided.")
            custom_logger.info(f"Loading tree from {self.tree_path}")
            self.tree = load_tree(self.tree_path)

        if self.stages is None:
            if not self.stages_path:
                raise ValueError("Either stages or stages_path must be provided.")
            self.stages = load_registry(self.stages_path)
        self.stages = make_registry(self.stages)

        if self.expected is None:
            if not self.expected_path:
                raise ValueError("Either expected or expected_path must be provided.")
            self.expected = load_call_graph(self.expected_path)

    def run(self) -> VerificationResult:
        """Walks the tree and verifies the recovered call graph."""
        self._setup_logging_and_debug()
        try:
            return self._run()
        finally:
            self._teardown_logging()

    def _run(self):
        self._resolve_inputs()

        custom_logger.info(f"Running {self.name}")
        try:
            self.call_graph = build_call_graph(self.tree, self.stages)
        except UnregisteredStageError as e:
            custom_logger.error(f"[{self.name}] Walk aborted: {e}")
            raise

        if self.debug_dir:
            save_tree(self.tree, os.path.join(self.debug_dir, "tree.json"))
            save_call_graph(self.call_graph, os.path.join(self.debug_dir, "produced.json"))

        result = check_call_graphs(self.call_graph, self.expected)

        if self.debug_dir:
            highlight = set()
            reason = result.reason
            for attr in ("caller", "name"):
                if hasattr(reason, attr):
                    highlight.add(getattr(reason, attr))
            save_dot(self.call_graph, os.path.join(self.debug_dir, "produced.dot"), highlight)
            save_dot(self.expected, os.path.join(self.debug_dir, "expected.dot"), highlight)

        self._log_summary(result)
        return result

    def _log_summary(self, result):
        custom_logger.info("=" * 70)
        custom_logger.info(f"CALL GRAPH CHECK: {self.name}")
        custom_logger.info("-" * 70)
        for caller in sorted(self.call_graph):
            callees = ", ".join(self.call_graph[caller])
            custom_logger.info(f"  {caller:<28} -> ({callees})")
        custom_logger.info("-" * 70)
        status = "PASSED" if result else f"FAILED: {result.message}"
        custom_logger.info(f"  Result: {status}")
        custom_logger.info("=" * 70)
